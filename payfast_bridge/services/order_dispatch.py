import asyncio
import logging
from collections.abc import Awaitable, Callable

from payfast_bridge.dto.notification import VerifiedNotification
from payfast_bridge.utils.runtime import register_background_task

logger = logging.getLogger(__name__)

# Must be idempotent on merchant_order_id: the gateway may deliver twice.
OrderStatusCallback = Callable[[VerifiedNotification], Awaitable[None]]


async def log_order_status(result: VerifiedNotification) -> None:
    if result.is_complete:
        logger.info("Payment completed. m_payment_id=%s amount_gross=%s", result.merchant_order_id, result.gross_amount)
    else:
        logger.info("Payment status update. m_payment_id=%s payment_status=%s", result.merchant_order_id, result.status)


def schedule_order_update(
    callback: OrderStatusCallback, result: VerifiedNotification, timeout_seconds: float
) -> asyncio.Task:
    task = asyncio.create_task(apply_order_update(callback, result, timeout_seconds))
    register_background_task(task)

    def _log_task_result(done_task: asyncio.Task) -> None:
        try:
            done_task.result()
        except asyncio.CancelledError:
            # Expected during graceful shutdown task draining.
            return
        except asyncio.TimeoutError:
            logger.error(
                "Order status callback timed out. m_payment_id=%s timeout_seconds=%s",
                result.merchant_order_id,
                timeout_seconds,
            )
        except Exception:  # noqa: BLE001
            logger.exception("Order status callback failed. m_payment_id=%s", result.merchant_order_id)

    task.add_done_callback(_log_task_result)
    return task


async def apply_order_update(
    callback: OrderStatusCallback, result: VerifiedNotification, timeout_seconds: float
) -> None:
    await asyncio.wait_for(callback(result), timeout=timeout_seconds)
