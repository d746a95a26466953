"""
Global settings for TestMe.
"""

from pathlib import Path

# Page
PAGE_TITLE = "TestMe.ai"
PAGE_ICON = "📝"

# Intro banner
INTRO_TITLE = "Welcome to TestMe.ai"
INTRO_PARAGRAPHS = [
    (
        "This application is inspired by the podcast of Andrew Huberman, specifically the episode "
        "\"Optimal Protocols for Studying & Learning\". In this episode, Andrew discusses "
        "science-supported protocols to optimize your depth and rate of learning of material and skills. "
        "He explains the neurobiology of learning and neuroplasticity and how correctly timed, "
        "self-directed test-taking can be leveraged to improve learning and prevent forgetting."
    ),
    (
        "By using this application, you can generate test questions based on any text you provide, "
        "answer them, and receive feedback to enhance your learning experience."
    ),
]

# LLM
OPENAI_MODEL = "gpt-3.5-turbo"
DEFAULT_TEMPERATURE = 0.7

# Local storage
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = PROJECT_ROOT / "data"
DB_PATH = DATA_DIR / "app.db"
CREDENTIAL_KEY = "openai_api_key"
