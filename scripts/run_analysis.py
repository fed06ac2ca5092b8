#!/usr/bin/env python3
import argparse
import json
from pathlib import Path

import httpx


def _load_segments(path: Path) -> list:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("segments") or []
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of segments in {path}")
    return payload


def main() -> None:
    parser = argparse.ArgumentParser(description="Analyze a timestamped pitch transcript against a running backend.")
    parser.add_argument("--transcript", required=True, help="JSON file with [{start, end, text}, ...] segments.")
    parser.add_argument("--api-base", default="http://127.0.0.1:8000", help="Backend base URL.")
    parser.add_argument("--track", default="hackathon_jury", help="Pitch track.")
    parser.add_argument("--duration-seconds", type=float, default=None, help="Recording duration.")
    parser.add_argument("--baseline-session-id", default=None, help="Earlier session to compare against.")
    parser.add_argument("--jury-questions", action="store_true", help="Also request jury questions.")
    args = parser.parse_args()

    transcript_path = Path(args.transcript).expanduser().resolve()
    if not transcript_path.exists():
        raise FileNotFoundError(f"Transcript file not found: {transcript_path}")
    segments = _load_segments(transcript_path)

    with httpx.Client(timeout=120.0, trust_env=False) as client:
        create_resp = client.post(f"{args.api_base}/api/sessions", json={"track": args.track})
        create_resp.raise_for_status()
        session_id = create_resp.json()["session_id"]
        print(f"created session: {session_id}")

        analyze_resp = client.post(
            f"{args.api_base}/api/sessions/{session_id}/analyze",
            json={
                "segments": segments,
                "duration_seconds": args.duration_seconds,
                "baseline_session_id": args.baseline_session_id,
            },
        )
        analyze_resp.raise_for_status()
        result = analyze_resp.json()
        print(json.dumps(result, indent=2))

        if args.jury_questions:
            jury_resp = client.post(f"{args.api_base}/api/sessions/{session_id}/jury-questions")
            jury_resp.raise_for_status()
            print(json.dumps(jury_resp.json(), indent=2))


if __name__ == "__main__":
    main()
