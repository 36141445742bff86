"""
Telegram service for place administrators
Sends notices about new bookings and confirmed payments
"""
import os
import logging
from typing import Optional
from telegram import Bot
from telegram.error import TelegramError

logger = logging.getLogger(__name__)

BOOKING_TYPE_LABELS = {
    "guest_house": "🏡 Guest house",
    "restaurant": "🍽 Restaurant",
}


class TelegramNotifier:
    """Sends Telegram notices to platform administrators"""

    def __init__(self, bot_token: Optional[str] = None, admin_chat_ids: Optional[str] = None):
        self.bot_token = bot_token if bot_token is not None else os.getenv("TELEGRAM_BOT_TOKEN")
        self.admin_chat_ids = self._parse_chat_ids(
            admin_chat_ids if admin_chat_ids is not None else os.getenv("TELEGRAM_ADMIN_CHAT_IDS", "")
        )
        self.bot = None

        if self.bot_token:
            try:
                self.bot = Bot(token=self.bot_token)
                logger.info("✅ Telegram Bot initialized")
            except Exception as e:
                logger.error(f"❌ Telegram Bot initialization failed: {e}")
        else:
            logger.warning("⚠️ TELEGRAM_BOT_TOKEN is not set, admin notices are disabled")

    @staticmethod
    def _parse_chat_ids(chat_ids_str: str) -> list:
        """Comma separated chat ids"""
        if not chat_ids_str:
            return []
        return [int(chat_id.strip()) for chat_id in chat_ids_str.split(",") if chat_id.strip()]

    @property
    def enabled(self) -> bool:
        return bool(self.bot and self.admin_chat_ids)

    async def _broadcast(self, message: str) -> bool:
        success_count = 0
        for chat_id in self.admin_chat_ids:
            try:
                await self.bot.send_message(
                    chat_id=chat_id,
                    text=message,
                    parse_mode="HTML"
                )
                success_count += 1
                logger.info(f"✅ Notice sent to admin {chat_id}")
            except TelegramError as e:
                logger.error(f"❌ Failed to send notice to admin {chat_id}: {e}")
        return success_count > 0

    async def send_new_booking_notification(
        self,
        booking_id: int,
        booking_type: str,
        place_name: str,
        client_name: str,
        total_price: float
    ) -> bool:
        """Notice about a booking awaiting payment"""
        if not self.enabled:
            return False

        message = f"""
🎉 <b>New booking!</b>

{BOOKING_TYPE_LABELS.get(booking_type, booking_type)}: <b>{place_name}</b>
👤 <b>Client:</b> {client_name}
💰 <b>Total:</b> {total_price:.2f}

🆔 Booking #{booking_id} is awaiting payment
"""
        return await self._broadcast(message)

    async def send_payment_confirmed_notification(
        self,
        booking_id: int,
        place_name: str,
        client_name: str,
        amount: float,
        method: str,
        transaction_id: str
    ) -> bool:
        """Notice about a paid booking"""
        if not self.enabled:
            return False

        message = f"""
✅ <b>Payment received</b>

🏷 <b>Place:</b> {place_name}
👤 <b>Client:</b> {client_name}
💳 <b>Method:</b> {method}
💰 <b>Amount:</b> {amount:.2f}
🧾 <code>{transaction_id}</code>

🆔 Booking #{booking_id} is confirmed
"""
        return await self._broadcast(message)


# Global instance
telegram_notifier = TelegramNotifier()
