from html import escape
from urllib.parse import quote

from core.config import FRONTEND_URL


def video_subject(title: str) -> str:
    return f"🎬 New Short: {title}"


def unsubscribe_url(email: str, base_url: str = FRONTEND_URL) -> str:
    return f"{base_url}/unsubscribe?email={quote(email, safe='')}"


def add_unsubscribe_link(html: str, email: str, base_url: str = FRONTEND_URL) -> str:
    """Appends the per-recipient unsubscribe footer just before </body>."""
    url = escape(unsubscribe_url(email, base_url), quote=True)
    footer = (
        '<div style="margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; text-align: center;">'
        '<p style="color: #9ca3af; font-size: 12px; margin: 0;">'
        "Don't want these emails? "
        f'<a href="{url}" style="color: #8b5cf6; text-decoration: underline;">Unsubscribe</a>'
        "</p></div>"
    )
    if "</body>" in html:
        return html.replace("</body>", f"{footer}</body>", 1)
    return html + footer


def render_video_email(title: str, thumbnail_url: str, video_url: str) -> str:
    title = escape(title or "New video")
    thumb = escape(thumbnail_url or "", quote=True)
    link = escape(video_url, quote=True)
    thumb_block = (
        f'<img src="{thumb}" alt="{title}" style="width: 100%; height: auto; display: block;">'
        if thumb else ""
    )

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>New YouTube Short!</title>
</head>
<body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; background: #fef3c7;">
  <div style="max-width: 600px; margin: 0 auto; padding: 40px 20px;">
    <div style="text-align: center; margin-bottom: 30px;">
      <h1 style="color: #7c3aed; font-size: 32px; font-weight: bold; margin: 0;">🎬 New Short Available!</h1>
    </div>
    <div style="background: white; border-radius: 16px; overflow: hidden;">
      {thumb_block}
      <div style="padding: 30px;">
        <h2 style="color: #1f2937; font-size: 24px; margin: 0 0 15px 0; font-weight: 600;">{title}</h2>
        <p style="color: #6b7280; font-size: 16px; line-height: 1.6; margin: 0 0 25px 0;">
          Check out my latest YouTube Short! I think you'll love this one. 🎉
        </p>
        <a href="{link}" style="display: inline-block; padding: 14px 32px; background: #7c3aed; color: white; text-decoration: none; border-radius: 9999px; font-weight: 600;">
          Watch Now →
        </a>
      </div>
    </div>
    <div style="text-align: center; margin-top: 30px; padding-top: 20px;">
      <p style="color: #9ca3af; font-size: 14px; margin: 0;">Thanks for subscribing! More amazing content coming soon.</p>
    </div>
  </div>
</body>
</html>
"""
