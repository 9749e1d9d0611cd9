"""
Roulette Service - the "lucky number" game.

Draws a uniform number in [1, 777], formats it by reward tier and keeps
a bounded history of recent draws for statistics.
"""
import random
import threading
import time
from collections import deque
from typing import Callable, List, Optional

from jester.core.logging import logger
from jester.models.schemas import GameResult

MIN_NUMBER = 1
MAX_NUMBER = 777
JACKPOT = 777

# (name, lowest number, emoji, title, lines)
TIERS = [
    ("jackpot", 777, "🎉", "🎉 **ДЖЕКПОТ!** 🎉",
     ["Поздравляем! Вы выиграли максимальный приз!", "💎 Невероятная удача! ✨"]),
    ("excellent", 700, "⭐", "⭐ **Отличный результат!** ⭐",
     ["Вам очень повезло!", "🍀 Удача определенно на вашей стороне!"]),
    ("good", 500, "👍", "👍 **Хороший результат!** 👍",
     ["Неплохая удача!", "🎲 Попробуйте ещё раз!"]),
    ("average", 300, "🎯", "🎯 **Средний результат**",
     ["Не расстраивайтесь!", "🔄 Следующий раз повезёт больше!"]),
    ("beginner", 100, "🌟", "🌟 **Начальная удача**",
     ["Это только начало!", "💪 Продолжайте играть!"]),
    ("try_again", 1, "🍀", "🍀 **Попробуйте ещё раз!** 🍀",
     ["Удача любит настойчивых!", "🎰 Крутите рулетку снова!"]),
]

TIER_LABELS = {
    "jackpot": "🎉 **Джекпоты (777):**",
    "excellent": "⭐ **Отличные (700-776):**",
    "good": "👍 **Хорошие (500-699):**",
    "average": "🎯 **Средние (300-499):**",
    "beginner": "🌟 **Начальные (100-299):**",
    "try_again": "🍀 **Мимо (1-99):**",
}


def tier_of(number: int) -> str:
    """Name of the reward tier a number falls into."""
    for name, lowest, *_ in TIERS:
        if number >= lowest:
            return name
    raise ValueError(f"Number out of range: {number}")


def _tier(name: str):
    return next(t for t in TIERS if t[0] == name)


class RouletteService:
    """Random-number game with a bounded, thread-safe history."""

    def __init__(
        self,
        history_size: int = 100,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.history_size = history_size
        self._rng = rng or random.Random()
        self._clock = clock
        self._history: deque = deque(maxlen=history_size)
        self._lock = threading.Lock()

    def spin(self) -> GameResult:
        """Draw a number and append it to the history."""
        with self._lock:
            result = GameResult(number=self._rng.randint(MIN_NUMBER, MAX_NUMBER), timestamp=self._clock())
            self._history.append(result)
        logger.info(f"Roulette spin: {result.number} ({tier_of(result.number)})")
        return result

    def history(self) -> List[GameResult]:
        """Snapshot of the history, oldest first."""
        with self._lock:
            return list(self._history)

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()
        logger.info("Roulette history cleared")

    def format_result(self, result: GameResult) -> str:
        _, _, _, title, lines = _tier(tier_of(result.number))
        return "\n".join([
            "🎰 **Рулетка удачи!**",
            "",
            f"🔢 **Ваше число: {result.number}**",
            "",
            title,
            *lines,
        ])

    def get_statistics(self) -> str:
        results = self.history()
        if not results:
            return "📊 **Статистика рулетки**\n\nПока нет результатов. Начните игру командой \"lucky\"!"

        numbers = [r.number for r in results]
        total = len(numbers)
        counts = {name: 0 for name, *_ in TIERS}
        for number in numbers:
            counts[tier_of(number)] += 1

        lines = [
            "📊 **Статистика рулетки**",
            "",
            f"🎲 **Всего игр:** {total}",
            f"📈 **Среднее число:** {sum(numbers) / total:.1f}",
            f"🔺 **Максимум:** {max(numbers)}",
            f"🔻 **Минимум:** {min(numbers)}",
            "",
            "**Распределение результатов:**",
        ]
        for name, *_ in TIERS:
            line = f"{TIER_LABELS[name]} {counts[name]}"
            if counts[name]:
                line += f" ({counts[name] * 100 / total:.2f}%)"
            lines.append(line)
        return "\n".join(lines)

    def recent_results(self, count: int = 10) -> str:
        results = self.history()[-count:] if count > 0 else []
        if not results:
            return "🎰 Нет результатов для показа"

        lines = [f"🎲 **Последние {len(results)} результатов:**", ""]
        for result in reversed(results):
            emoji = _tier(tier_of(result.number))[2]
            lines.append(f"{emoji} {result.number}")
        return "\n".join(lines)
