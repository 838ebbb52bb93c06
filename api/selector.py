import random
from typing import Sequence

from .exceptions import EmptyCandidatePool

# SystemRandom берет энтропию из ОС: общего состояния между потоками нет
_system_random = random.SystemRandom()


class ReviewerSelector:
    """
    Равномерный случайный выбор ревьювера из пула кандидатов.

    Источник случайности передается в конструктор, чтобы в тестах можно было
    подставить random.Random(seed) и проверять конкретный выбор.
    """

    def __init__(self, rng: random.Random = None):
        self._rng = rng if rng is not None else _system_random

    def pick(self, candidates: Sequence[str]) -> str:
        if not candidates:
            raise EmptyCandidatePool('candidate pool is empty')
        return candidates[self._rng.randrange(len(candidates))]
