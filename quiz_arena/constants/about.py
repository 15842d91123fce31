"""Static metadata describing QuizArena."""

APP_NAME = "QuizArena"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "QuizArena lets a teacher generate multiple-choice quizzes with AI, publish them, "
    "and share study notes. Students take quizzes against the clock from the web page "
    "and compete on per-quiz leaderboards, day streaks, and badges."
)

HELP_TEXT = (
    "Generate a quiz from a topic, a pasted article, or an uploaded PDF. Review the "
    "questions and explanations, set the time limit, and publish.\n\n"
    "Students open the student page, enter their name, and pick a quiz. The quiz is "
    "submitted automatically when the timer reaches zero.\n\n"
    "Leaderboards keep the earliest submission of each score per student, so "
    "repeated identical submissions do not add rows."
)
