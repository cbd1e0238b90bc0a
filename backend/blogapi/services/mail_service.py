# 이메일 발송 서비스
# - 회원가입 인증 메일, 비밀번호 재설정 메일
# - BackgroundTasks 로 응답 이후에 실행되는 fire-and-forget 작업
# - 발송 실패는 로그만 남기고 호출자에게 전파하지 않습니다.

import logging
import smtplib
from email.mime.text import MIMEText

from fastapi import Depends

from ..core.config import Settings, get_settings

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 10


class MailService:
    def __init__(self, settings: Settings):
        self.settings = settings

    def verification_link(self, code: str) -> str:
        return f"{self.settings.BASE_URL.rstrip('/')}/api/auth/verify-email/{code}"

    def reset_link(self, code: str) -> str:
        return f"{self.settings.FRONTEND_URL.rstrip('/')}/reset-password?code={code}"

    def send_verification_email(self, to_email: str, code: str) -> bool:
        link = self.verification_link(code)
        company = self.settings.COMPANY_NAME
        body = (
            f"<p>Welcome to {company}!</p>"
            f"<p>Please click the link below to verify your email address:</p>"
            f'<a href="{link}">{link}</a>'
            f"<p>If you did not request this, you can safely ignore this email.</p>"
        )
        return self._deliver(to_email, "Verify Your Email", body, kind="verification")

    def send_password_reset_email(self, to_email: str, code: str) -> bool:
        link = self.reset_link(code)
        company = self.settings.COMPANY_NAME
        body = (
            f"<p>A password reset was requested for your {company} account.</p>"
            f"<p>Click the link below to choose a new password:</p>"
            f'<a href="{link}">{link}</a>'
            f"<p>If you did not request this, you can safely ignore this email.</p>"
        )
        return self._deliver(to_email, "Reset Your Password", body, kind="password-reset")

    def _deliver(self, to_email: str, subject: str, html: str, kind: str) -> bool:
        try:
            self._send_email(to_email, subject, html)
        except (smtplib.SMTPException, OSError):
            # 상태 변경(회원가입 등)은 이미 커밋됨. 실패는 운영 로그로만 확인합니다.
            logger.exception(f"[MailService] Failed to send {kind} email to {to_email}")
            return False
        logger.info(f"[MailService] Sent {kind} email to {to_email}")
        return True

    def _send_email(self, to_email: str, subject: str, html: str):
        msg = MIMEText(html, "html", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.settings.SMTP_FROM
        msg["To"] = to_email

        server = smtplib.SMTP(self.settings.SMTP_HOST, self.settings.SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS)
        try:
            if self.settings.SMTP_TLS:
                server.starttls()
            if self.settings.SMTP_USER and self.settings.SMTP_PASSWORD:
                server.login(self.settings.SMTP_USER, self.settings.SMTP_PASSWORD)
            server.sendmail(self.settings.SMTP_FROM, [to_email], msg.as_string())
        finally:
            server.quit()


def get_mail_service(settings: Settings = Depends(get_settings)) -> MailService:
    return MailService(settings)
