"""Fixed Russian UI texts shown by the bot."""
from typing import Iterable

from jester.core.constants import BOT_VERSION
from jester.models.schemas import ServiceStatus

MAIN_MENU = (
    "👋 **Привет! Я Jester, бот с искусственным интеллектом.**\n\n"
    "Что я умею:\n"
    "🤖 Отвечать на вопросы с помощью AI\n"
    "😄 Рассказывать анекдоты (напишите «анекдот»)\n"
    "🌤️ Показывать погоду (напишите «погода»)\n"
    "🔮 Составлять гороскоп (напишите знак зодиака)\n"
    "🎰 Крутить рулетку удачи (напишите «рулетка»)\n\n"
    "Выберите действие в меню ниже 👇"
)

HELP = (
    "📖 **Справка**\n\n"
    "**Команды:**\n"
    "/start - главное меню\n"
    "/help - эта справка\n"
    "/about - о боте\n"
    "/status - статус сервисов\n"
    "/models - используемая AI модель\n"
    "/joke, /анекдот - случайный анекдот\n"
    "/weather, /погода - текущая погода\n"
    "/horoscope, /гороскоп - гороскоп на сегодня\n"
    "/zodiac - знаки зодиака\n"
    "/lucky, /рулетка - рулетка удачи\n"
    "/stats - статистика рулетки\n\n"
    "**В группах** я отвечаю, когда ко мне обращаются через @упоминание "
    "или ответом на моё сообщение."
)

ABOUT = (
    "ℹ️ **О боте**\n\n"
    "Jester - дружелюбный бот для чатов и групп.\n"
    "AI-ответы, анекдоты, погода, гороскопы и немного азарта.\n\n"
    f"Версия: {BOT_VERSION}"
)

MODELS = (
    "🧠 **AI модель**\n\n"
    "Google Gemini 2.5 Flash\n"
    "Быстрые ответы на вопросы на русском и английском языках."
)

CREATOR_INFO = (
    "👨‍💻 **Создатель бота**\n\n"
    "Бот разработан с любовью к хорошим шуткам.\n"
    "Предложения и идеи приветствуются!"
)

BACK_TO_MAIN = "🏠 Вы вернулись в главное меню. Выберите действие 👇"

JOKE_INTRO = "😄 **Анекдот для вас:**\n\n"
WEATHER_ERROR = "❌ Не удалось получить прогноз погоды. Попробуйте позже."
WEATHER_NOT_CONFIGURED = "⚠️ API ключ для прогноза погоды не настроен. Обратитесь к администратору."

APOLOGY = "❌ Произошла ошибка при обработке сообщения."
UNKNOWN_COMMAND = "❓ Неизвестная команда. Используйте /help для просмотра доступных команд."
UNKNOWN_ACTION = "❓ Неизвестное действие"
AI_UNAVAILABLE = "❌ Ошибка при обращении к AI. Попробуйте позже."

ROULETTE_FILLER = "🎰 Крутим барабан... Удачи!"


def _mark(flag: bool, yes: str = "✅", no: str = "❌") -> str:
    return yes if flag else no


def status_report(ai_available: bool, services: Iterable[ServiceStatus]) -> str:
    """Render the /status message."""
    lines = [
        "🤖 **Статус бота:**",
        "",
        f"AI API: {_mark(ai_available)} {'Онлайн' if ai_available else 'Недоступен'}",
        "",
        "**Дополнительные сервисы:**",
    ]
    for status in services:
        if not status.configured:
            state = "❌ Не настроен"
        elif status.cache_fresh:
            state = f"✅ Активен, в кэше: {status.entries}"
        else:
            state = "⚠️ Кэш устарел"
        updated = status.last_refresh.strftime("%d.%m.%Y %H:%M") if status.last_refresh else "никогда"
        lines.append(f"• {status.name}: {state} (обновлено: {updated})")
    lines.append("🎰 Рулетка: ✅ Активна")
    lines.append("")
    lines.append(f"Версия: {BOT_VERSION}")
    return "\n".join(lines)
