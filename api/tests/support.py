class FixedIndexRandom:
    """Детерминированный источник случайности: всегда выбирает элемент с заданным индексом"""

    def __init__(self, index=0):
        self.index = index
        self.calls = []

    def randrange(self, stop):
        self.calls.append(stop)
        return min(self.index, stop - 1)
