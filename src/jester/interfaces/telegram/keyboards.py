"""Inline keyboards for the opaque control sets."""
from typing import List, Optional, Sequence

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from jester.core.content import ZodiacSign
from jester.models.schemas import Controls
from jester.services.intent.router import HOROSCOPE_CALLBACK_PREFIX


def main_menu_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("ℹ️ О боте", callback_data="cmd_about"),
            InlineKeyboardButton("❓ Помощь", callback_data="cmd_help"),
        ],
        [
            InlineKeyboardButton("📊 Статус", callback_data="cmd_status"),
            InlineKeyboardButton("🧠 Модели", callback_data="cmd_models"),
        ],
        [
            InlineKeyboardButton("🔮 Гороскоп", callback_data="horoscope_random"),
            InlineKeyboardButton("👨‍💻 О создателе", callback_data="info_creator"),
        ],
    ])


def zodiac_keyboard(signs: Sequence[ZodiacSign], per_row: int = 3) -> InlineKeyboardMarkup:
    """Twelve sign buttons, a random pick and the way back."""
    buttons = [
        InlineKeyboardButton(f"{z.emoji} {z.title}", callback_data=f"{HOROSCOPE_CALLBACK_PREFIX}{z.sign}")
        for z in signs
    ]
    rows: List[List[InlineKeyboardButton]] = [
        buttons[i:i + per_row] for i in range(0, len(buttons), per_row)
    ]
    rows.append([InlineKeyboardButton("🎲 Случайный гороскоп", callback_data="horoscope_random")])
    rows.append([InlineKeyboardButton("◀️ Главное меню", callback_data="back_main")])
    return InlineKeyboardMarkup(rows)


def creator_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("◀️ Назад", callback_data="back_main")],
    ])


def build_keyboard(controls: Optional[Controls], signs: Sequence[ZodiacSign]) -> Optional[InlineKeyboardMarkup]:
    """Turn a control set into Telegram markup (None for no controls)."""
    if controls is None:
        return None
    if controls is Controls.MAIN_MENU:
        return main_menu_keyboard()
    if controls is Controls.ZODIAC_MENU:
        return zodiac_keyboard(signs)
    if controls is Controls.CREATOR_INFO:
        return creator_keyboard()
    raise ValueError(f"Unknown control set: {controls}")
