import logging
from typing import AsyncIterator, Optional

from src.services.errors import LLMError

logger = logging.getLogger(__name__)

CHAT_ERROR_TEMPLATE = "Sorry, I ran into an error: {error}"


class ChatSubscription:
    """Cancellable view over a streamed model reply.

    Chunks are delivered until the stream ends, fails or ``cancel()`` is
    called. Whatever arrived before cancellation stays in ``text``.
    """

    def __init__(self, chunks: AsyncIterator[str]):
        self._chunks = chunks
        self._cancelled = False
        self.text = ""
        self.error: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    async def chunks(self) -> AsyncIterator[str]:
        try:
            async for chunk in self._chunks:
                if self._cancelled:
                    logger.info("Chat stream cancelled by consumer")
                    break
                self.text += chunk
                yield chunk
        except LLMError as e:
            logger.error(f"Error during chat stream: {e}")
            self.error = str(e)
        except Exception as e:
            logger.exception("Unexpected error during chat stream")
            self.error = str(e)
        finally:
            aclose = getattr(self._chunks, "aclose", None)
            if aclose is not None:
                await aclose()

    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return CHAT_ERROR_TEMPLATE.format(error=self.error)
