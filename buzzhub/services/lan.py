"""
Startup banner: LAN URLs and terminal QR codes for phones
"""
import logging
from typing import List

import qrcode

from buzzhub.utils import get_local_ips


logger = logging.getLogger(__name__)


def lan_urls(port: int) -> List[str]:
    """URLs participants can open; loopback if no LAN address is found"""
    ips = get_local_ips()
    if not ips:
        return [f"http://127.0.0.1:{port}"]
    return [f"http://{ip}:{port}" for ip in ips]


def render_qr(url: str) -> str:
    """Render a QR code as text, two characters per module"""
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    return "\n".join(
        "".join("##" if cell else "  " for cell in row)
        for row in qr.get_matrix()
    )


def print_startup_info(port: int, show_qr: bool = True) -> List[str]:
    """Print where to connect; returns the URLs"""
    urls = lan_urls(port)
    print("=" * 60)
    print("Quiz buzzer server listening on:")
    for url in urls:
        print(f"  {url}")
    print("  master: /master    participants: /user")
    print("=" * 60)
    if show_qr:
        for url in urls:
            print(f"\nScan to join {url}:")
            print(render_qr(url))
    logger.info(f"🚀 Serving on {', '.join(urls)}")
    return urls
