"""
Email Service using Resend
Templates are written in MJML and compiled to HTML before sending
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import invite_email_template
from .exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY

INVITE_SUBJECT = "Shiftly Account Invitation"


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Resend response dict

    Raises:
        EmailDeliveryError: provider not configured or the send failed
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailDeliveryError("Email service not configured", status_code=500)

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
    except Exception as e:
        status_code = getattr(e, "code", None) or getattr(e, "status_code", None)
        details = getattr(e, "error_type", None) or getattr(e, "suggested_action", None)
        logger.error(
            f"❌ Email send error to {recipients}: {e}",
            extra={"status_code": status_code, "details": details},
        )
        raise EmailDeliveryError(str(e), status_code=status_code, details=details) from e

    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


async def send_invite_email(to: str, link: str) -> dict:
    """Send the account setup invitation"""
    return await send_email(
        to=to,
        subject=INVITE_SUBJECT,
        mjml_content=invite_email_template(link),
    )
