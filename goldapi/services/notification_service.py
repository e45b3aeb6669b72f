import html
import logging

from goldapi.config import Settings
from goldapi.services.aws_service import AwsService

logger = logging.getLogger(__name__)


class NotificationService:
    """가입자 안내 메일 (SES)"""

    def __init__(self, settings: Settings, aws_service: AwsService):
        self.settings = settings
        self.aws_service = aws_service

    def send_welcome_email(self, email: str, name: str, password: str) -> bool:
        """신규 가입 환영 메일 (로그인 정보 포함)

        발송 실패는 로그만 남기고 False 를 반환합니다. 가입 트랜잭션에는 영향이 없습니다.
        """
        subject = f"Welcome to {self.settings.APP_NAME}"
        text_body = (
            f"Dear {name},\n\n"
            "Welcome! Your account has been successfully created.\n\n"
            f"Email: {email}\nPassword: {password}\n\n"
            f"Log in at {self.settings.FRONTEND_URL} and change your password.\n"
        )

        try:
            message_id = self.aws_service.send_email(
                to_addresses=[email],
                subject=subject,
                html_body=self._generate_welcome_html(email, name, password),
                text_body=text_body,
            )
        except Exception as e:
            logger.error(f"Failed to send welcome email to {email}: {str(e)}")
            return False

        logger.info(f"Welcome email sent to {email} (message_id={message_id})")
        return True

    def _generate_welcome_html(self, email: str, name: str, password: str) -> str:
        app_name = html.escape(self.settings.APP_NAME)
        return f"""
        <!DOCTYPE html>
        <html lang="en">
        <head>
            <meta charset="UTF-8">
            <title>Welcome to {app_name}</title>
        </head>
        <body style="margin:0; padding:0; background-color:#f6f7fb; color:#1f2937; font-family:'Helvetica Neue', Arial, sans-serif;">
            <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="background-color:#f6f7fb; padding:48px 0;">
                <tr>
                    <td align="center">
                        <table role="presentation" width="480" cellpadding="0" cellspacing="0" style="background-color:#ffffff; border-radius:16px; border:1px solid #e5e7eb;">
                            <tr>
                                <td style="padding:32px 40px 16px 40px; text-align:center; font-size:24px; font-weight:700; color:#111827;">
                                    Welcome to {app_name}!
                                </td>
                            </tr>
                            <tr>
                                <td style="padding:0 40px 32px 40px; font-size:15px; line-height:1.7; color:#4b5563;">
                                    <p>Dear {html.escape(name)},</p>
                                    <p>Your account has been successfully created. You can now log in and manage your gold schemes.</p>
                                    <p>Your login credentials are:</p>
                                    <p>Email: <strong>{html.escape(email)}</strong><br>
                                    Password: <strong>{html.escape(password)}</strong></p>
                                    <p><a href="{html.escape(self.settings.FRONTEND_URL)}" style="color:#b45309;">Log in</a> and change your password after your first sign-in.</p>
                                </td>
                            </tr>
                        </table>
                    </td>
                </tr>
            </table>
        </body>
        </html>
        """
