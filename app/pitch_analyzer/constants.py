PROBLEM_LATE_AFTER_SECONDS = 20.0
PROBLEM_LATE_FULL_SEVERITY_SECONDS = 60.0
DEFAULT_DURATION_SECONDS = 60.0
MIN_JURY_TRANSCRIPT_CHARS = 50
MAX_JURY_QUESTIONS = 7
MAX_ERROR_CHARS = 1200
ANALYSIS_TRACKS = {"hackathon_jury", "hackathon_no_demo"}
JURY_QUESTION_TRACKS = {"hackathon_jury"}
NOT_FOUND_TIMESTAMP = -1.0
UNSET = object()
