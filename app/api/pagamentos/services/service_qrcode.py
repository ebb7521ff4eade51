import base64
import io
import logging

import qrcode

logger = logging.getLogger(__name__)

# Quadro cinza 64x64 exibido quando a renderização falha; o copia-e-cola continua válido
QR_CODE_PLACEHOLDER = (
    "iVBORw0KGgoAAAANSUhEUgAAAEAAAABACAAAAACPAi4CAAAAQUlEQVR42mNwoBAwDBMDHuAEC4AAt+yoAaMGjBowasCoAaMG"
    "0MaABWSC4WTAaDoYNWDUgFEDRg0YNWBwGTDC+84A6bQ8prNWxFgAAAAASUVORK5CYII="
)


def renderizar_qrcode_base64(conteudo: str) -> str:
    """Renderiza o payload PIX em PNG e devolve em base64."""
    qr = qrcode.QRCode(border=2, box_size=8, error_correction=qrcode.constants.ERROR_CORRECT_M)
    qr.add_data(conteudo)
    qr.make(fit=True)
    imagem = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    imagem.save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def qrcode_ou_placeholder(conteudo: str) -> str:
    try:
        return renderizar_qrcode_base64(conteudo)
    except Exception as e:
        logger.error(f"[Pagamentos] Falha ao renderizar QR Code, usando placeholder: {e}", exc_info=True)
        return QR_CODE_PLACEHOLDER
