"""Security utilities for label sanitization and URL validation"""
from urllib.parse import urlparse
import bleach


def strip_html(text):
    """
    Remove all HTML from a short text value such as a menu label.

    Args:
        text (str): Raw text from user

    Returns:
        str: Plain text with tags stripped and surrounding whitespace removed
    """
    if not text:
        return ''

    cleaned = bleach.clean(text, tags=[], attributes={}, strip=True)
    # bleach escapes bare ampersands and angle brackets; labels are rendered as text
    cleaned = cleaned.replace('&amp;', '&').replace('&lt;', '<').replace('&gt;', '>')
    return cleaned.strip()


def validate_external_url(url):
    """
    Validate an external menu link.
    Only absolute http/https URLs with a host are accepted.

    Args:
        url (str): The URL to validate

    Returns:
        bool: True if URL is safe to link to
    """
    if not url or not isinstance(url, str):
        return False

    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False

    if parsed.scheme not in ['http', 'https']:
        return False

    return bool(parsed.netloc)


def validate_redirect_url(url, allowed_hosts):
    """
    Check the ``next`` target handed back after login.

    Paths on this service pass. Absolute URLs must be http/https and point at
    one of allowed_hosts (the port is ignored). Scheme-relative ``//host``
    values are refused.

    Args:
        url (str): Requested redirect target
        allowed_hosts (iterable): Hostnames the dashboard is served from

    Returns:
        bool: True if the client may be sent there
    """
    if not url or url.startswith('//'):
        return False

    try:
        parsed = urlparse(url)
    except ValueError:
        return False

    if not parsed.scheme and not parsed.netloc:
        return True
    if parsed.scheme not in ('http', 'https') or not parsed.hostname:
        return False
    return parsed.hostname in {host.lower() for host in allowed_hosts}
