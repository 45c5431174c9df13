# Import models so Base metadata is aware of them
from .auth import User  # noqa: F401
from .library import Book, Section, Flashcard  # noqa: F401
from .progress import DifficultyLevel, StudyProgress  # noqa: F401
