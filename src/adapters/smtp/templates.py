"""HTML bodies for the verification and welcome emails."""

from html import escape

VERIFICATION_SUBJECT = "Verify Your HD Notes Account - OTP Code"
WELCOME_SUBJECT = "Welcome to HD Notes!"

_STYLE = """
      body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
      .container { max-width: 600px; margin: 0 auto; padding: 20px; }
      .header { background: #3B82F6; color: white; padding: 20px; text-align: center; border-radius: 10px 10px 0 0; }
      .content { background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }
      .otp-code { background: #fff; border: 2px solid #3B82F6; padding: 20px; text-align: center; font-size: 24px; font-weight: bold; letter-spacing: 3px; margin: 20px 0; border-radius: 10px; }
      .button { display: inline-block; background: #3B82F6; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; margin: 20px 0; }
      .footer { text-align: center; margin-top: 20px; color: #666; font-size: 14px; }
"""


def _page(title: str, heading: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <style>{_STYLE}</style>
</head>
<body>
  <div class="container">
    <div class="header"><h1>{heading}</h1></div>
    <div class="content">
{body}
    </div>
    <div class="footer"><p>&copy; HD Notes. All rights reserved.</p></div>
  </div>
</body>
</html>
"""


def verification_email(name: str, code: str, valid_minutes: int) -> str:
    """Render the email carrying a verification code."""
    body = f"""      <h2>Hello {escape(name)}!</h2>
      <p>Welcome to HD Notes! Please verify your email address to complete your registration.</p>
      <p>Your verification code is:</p>
      <div class="otp-code">{escape(code)}</div>
      <p>This code will expire in {valid_minutes} minutes. If you didn't request this verification, please ignore this email.</p>"""
    return _page("Verify Your HD Notes Account", "HD Notes Verification", body)


def welcome_email(name: str, frontend_url: str) -> str:
    """Render the email sent once an account is verified."""
    signin_url = escape(f"{frontend_url.rstrip('/')}/signin", quote=True)
    body = f"""      <h2>Hello {escape(name)}!</h2>
      <p>Your account has been successfully verified! You can now start using HD Notes to organize your thoughts and ideas.</p>
      <a href="{signin_url}" class="button">Start Taking Notes</a>
      <p>If you have any questions, feel free to reach out to our support team.</p>"""
    return _page("Welcome to HD Notes", "Welcome to HD Notes!", body)
