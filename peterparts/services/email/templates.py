from datetime import datetime, timezone
from html import escape
from typing import Optional

BRAND_NAME = "PeterParts"

_LAYOUT = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>{title}</title>
  </head>
  <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
{body}
    <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
    <p style="font-size: 12px; color: #999;">
      &copy; {year} {brand}. All rights reserved.
    </p>
  </body>
</html>"""


def _layout(title: str, body: str) -> str:
    return _LAYOUT.format(
        title=escape(title),
        body=body,
        year=datetime.now(timezone.utc).year,
        brand=BRAND_NAME,
    )


def otp_email_html(code: str, expires_in_minutes: int) -> str:
    body = f"""    <h1 style="color: #333;">Your Verification Code</h1>
    <p style="font-size: 16px; color: #666;">
      Use the following code to verify your email address:
    </p>
    <div style="background-color: #f5f5f5; padding: 20px; text-align: center; margin: 20px 0; border-radius: 8px;">
      <span style="font-size: 32px; font-weight: bold; letter-spacing: 8px; color: #333;">
        {escape(code)}
      </span>
    </div>
    <p style="font-size: 14px; color: #999;">
      This code will expire in {expires_in_minutes} minutes.
    </p>
    <p style="font-size: 14px; color: #999;">
      If you didn't request this code, you can safely ignore this email.
    </p>"""
    return _layout("Your Verification Code", body)


def otp_email_text(code: str, expires_in_minutes: int) -> str:
    return (
        f"Your verification code is: {code}\n\n"
        f"This code will expire in {expires_in_minutes} minutes.\n\n"
        "If you didn't request this code, you can safely ignore this email."
    )


def welcome_email_html(name: Optional[str] = None) -> str:
    display_name = escape(name or "there")
    body = f"""    <h1 style="color: #333;">Welcome to {BRAND_NAME}!</h1>
    <p style="font-size: 16px; color: #666;">
      Hi {display_name},
    </p>
    <p style="font-size: 16px; color: #666;">
      Thank you for joining {BRAND_NAME}. We're excited to have you!
    </p>
    <p style="font-size: 16px; color: #666;">
      Start exploring our collection of premium Kitchenaid and Cuisinart gears and appliances.
    </p>"""
    return _layout(f"Welcome to {BRAND_NAME}", body)


def welcome_email_text(name: Optional[str] = None) -> str:
    display_name = name or "there"
    return (
        f"Welcome to {BRAND_NAME}, {display_name}!\n\n"
        f"Thank you for joining {BRAND_NAME}. We're excited to have you!\n\n"
        "Start exploring our collection of premium Kitchenaid and Cuisinart gears and appliances."
    )
