"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "QuizArena Teacher Console"
STUDENT_URL_PLACEHOLDER: str = "http://<teacher-ip>:8000/"
STORE_REFRESH_INTERVAL_MS: int = 1000

MODE_BUTTON_DASHBOARD: str = "My Quizzes"
MODE_BUTTON_CREATE: str = "Create Quiz"
MODE_BUTTON_NOTES: str = "Study Notes"
MODE_BUTTON_LOGOUT: str = "Log Out"

PASSWORD_DIALOG_TITLE: str = "Teacher Login"
PASSWORD_PROMPT: str = "Enter the teacher password:"
PASSWORD_REJECTED_MESSAGE: str = "Incorrect password."

PLACEHOLDER_TOPIC: str = "e.g. The history of the Roman Empire, or paste an article here..."
GENERATE_BUTTON: str = "Generate Quiz"
GENERATING_BUTTON: str = "Generating Questions..."
PUBLISH_BUTTON: str = "Publish Quiz"
DISCARD_BUTTON: str = "Discard"
SELECT_PDF_BUTTON: str = "Attach PDF"
PDF_FILE_FILTER: str = "PDF files (*.pdf)"
TOPIC_REQUIRED_MESSAGE: str = "Please provide a topic or upload a file."

NO_QUIZZES_MESSAGE: str = "No quizzes created yet."
NO_RESULTS_MESSAGE: str = "No attempts yet."
NO_NOTES_MESSAGE: str = "No study materials uploaded yet."
NOTE_UPLOAD_BUTTON: str = "Upload Note"
NOTE_FIELDS_REQUIRED_MESSAGE: str = "Please provide a title and a file."
