"""QuizMentor Backend - quiz, learning progress and knowledge-gap tracking"""

__version__ = "1.0.0"
