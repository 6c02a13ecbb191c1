"""FastAPI dependencies for collaborators that tests swap out."""

from .config import get_settings
from .services.gateway import OutcomeGenerator, WeightedOutcomeGenerator
from .services.mailer import Mailer

_outcome_generator = WeightedOutcomeGenerator()


def get_outcome_generator() -> OutcomeGenerator:
    return _outcome_generator


def get_mailer() -> Mailer:
    return Mailer(get_settings())
