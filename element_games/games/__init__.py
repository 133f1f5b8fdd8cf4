from .bingo import BingoSession
from .family_map import FamilyMapSession
from .flashcards import FlashcardSession
from .lightning import LightningSession
from .pairs import PairsSession
from .property_guess import PropertyGuessSession
from .quiz import QuizSession

from ..session import GameType

SESSION_CLASSES = {
    GameType.FLASHCARDS: FlashcardSession,
    GameType.QUIZ: QuizSession,
    GameType.BINGO: BingoSession,
    GameType.FAMILY_MAP: FamilyMapSession,
    GameType.PROPERTY_GUESS: PropertyGuessSession,
    GameType.PAIRS: PairsSession,
    GameType.LIGHTNING: LightningSession,
}


def create_session(game_type, catalog, sink=None, **kwargs):
    """Build the session class registered for `game_type`."""
    return SESSION_CLASSES[GameType(game_type)](catalog, sink, **kwargs)
