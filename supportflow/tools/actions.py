"""处理动作工具

账户解锁和邮件发送。两者都是模拟实现：等待一小段时间后返回成功。
"""

import asyncio
import logging
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from supportflow.tools.base import BaseTool


logger = logging.getLogger(__name__)

UNLOCK_DELAY = 0.1
SEND_EMAIL_DELAY = 0.15


class EmailTemplate(str, Enum):
    """邮件模板"""
    RESET_PASSWORD = "reset_password"
    UPDATE_BILLING = "update_billing"
    CANCEL_SUBSCRIPTION = "cancel_subscription"
    UNLOCK_CONFIRMATION = "unlock_confirmation"


async def unlock_account(
    account_identifier: str,
    reason: Optional[str] = None,
    delay_scale: float = 1.0,
) -> bool:
    """解锁被锁定的账户

    Args:
        account_identifier: 账户标识或邮箱
        reason: 解锁原因
        delay_scale: 模拟延迟倍率

    Returns:
        是否成功
    """
    logger.debug(f"[TOOL CALL] UnlockAccount - Account: {account_identifier}, Reason: {reason or '无'}")
    await asyncio.sleep(UNLOCK_DELAY * delay_scale)
    logger.debug(f"[TOOL RESULT] UnlockAccount - 账户 {account_identifier} 已解锁")
    return True


async def send_email(
    recipient_email: str,
    email_type: EmailTemplate,
    parameters: Optional[Dict[str, str]] = None,
    delay_scale: float = 1.0,
) -> bool:
    """发送模板邮件

    Args:
        recipient_email: 收件人
        email_type: 邮件模板
        parameters: 模板参数
        delay_scale: 模拟延迟倍率

    Returns:
        是否成功
    """
    params = ", ".join(f"{k}={v}" for k, v in (parameters or {}).items()) or "无"
    logger.debug(f"[TOOL CALL] SendEmail - Recipient: {recipient_email}, Type: {email_type.value}, Parameters: {params}")
    await asyncio.sleep(SEND_EMAIL_DELAY * delay_scale)
    logger.debug(f"[TOOL RESULT] SendEmail - 邮件 '{email_type.value}' 已发送至 {recipient_email}")
    return True


class UnlockAccountInput(BaseModel):
    """UnlockAccount 输入"""
    account_identifier: str = Field(description="要解锁的账户标识或邮箱")
    reason: Optional[str] = Field(default=None, description="解锁原因（可选）")


class SendEmailInput(BaseModel):
    """SendEmail 输入"""
    recipient_email: str = Field(description="收件人邮箱")
    email_type: EmailTemplate = Field(description="邮件模板类型")
    parameters: Optional[Dict[str, str]] = Field(default=None, description="模板参数（可选）")


class UnlockAccountTool(BaseTool[UnlockAccountInput]):
    """账户解锁工具"""

    def __init__(self, delay_scale: float = 1.0):
        self._delay_scale = delay_scale

    @property
    def name(self) -> str:
        return "UnlockAccount"

    @property
    def description(self) -> str:
        return "Desbloqueia uma conta de usuário bloqueada ou suspensa."

    @property
    def input_schema(self) -> type[UnlockAccountInput]:
        return UnlockAccountInput

    async def execute(self, input: UnlockAccountInput) -> bool:
        return await unlock_account(input.account_identifier, input.reason, self._delay_scale)


class SendEmailTool(BaseTool[SendEmailInput]):
    """邮件发送工具"""

    def __init__(self, delay_scale: float = 1.0):
        self._delay_scale = delay_scale

    @property
    def name(self) -> str:
        return "SendEmail"

    @property
    def description(self) -> str:
        return "Envia um email com template para recuperação de conta ou ações de suporte."

    @property
    def input_schema(self) -> type[SendEmailInput]:
        return SendEmailInput

    async def execute(self, input: SendEmailInput) -> bool:
        return await send_email(input.recipient_email, input.email_type, input.parameters, self._delay_scale)
