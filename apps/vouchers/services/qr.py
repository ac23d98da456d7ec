"""
QR code rendering for vouchers.

The QR payload is the bare voucher code; the staff scanner decodes it and
submits it to the redemption endpoint.
"""

from io import BytesIO


def render_voucher_qr(voucher, box_size: int = 10, border: int = 4) -> bytes:
    """
    Render a voucher code as a PNG QR code.

    Uses error correction level M (15% recovery), which keeps codes small
    and still scans from a phone screen.

    Args:
        voucher: Voucher to encode
        box_size: Pixels per QR module
        border: Quiet zone width in modules

    Returns:
        PNG image bytes
    """
    import qrcode

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(voucher.code)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = BytesIO()
    img.save(buffer)
    return buffer.getvalue()
