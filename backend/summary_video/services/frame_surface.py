"""
Superfície de desenho 2D sobre Pillow.

Equivale ao canvas do navegador: imagens com escala/alpha/clip/blend,
retângulos, círculos, gradientes e texto com contorno.
"""

import logging
from typing import Dict, List, Optional, Tuple

from PIL import Image, ImageChops, ImageColor, ImageDraw, ImageFont

from ..models.timeline import TextAlign, TextStyle

logger = logging.getLogger(__name__)

# Fontes tentadas quando nenhuma está configurada
DEFAULT_FONTS = {
    False: ["/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", "DejaVuSans.ttf", "Arial.ttf"],
    True: ["/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", "DejaVuSans-Bold.ttf", "Arial Bold.ttf"],
}

ANCHORS = {
    TextAlign.LEFT: "ls",
    TextAlign.CENTER: "ms",
    TextAlign.RIGHT: "rs",
}

Clip = Tuple  # ("rect", x, y, w, h) ou ("circle", cx, cy, r)


def rgba(color: str, alpha: float = 1.0) -> Tuple[int, int, int, int]:
    """Converte uma cor CSS em RGBA aplicando o alpha informado."""
    parsed = ImageColor.getrgb(color)
    base_alpha = parsed[3] if len(parsed) == 4 else 255
    return parsed[0], parsed[1], parsed[2], int(round(base_alpha * max(0.0, min(1.0, alpha))))


def gradient_image(size: Tuple[int, int], start: str, end: str) -> Image.Image:
    """Gradiente linear de dois pontos na diagonal (0,0) -> (w,h). Determinístico."""
    width, height = size
    # Máscara pequena calculada e ampliada: barato e sem numpy
    small_w, small_h = 64, max(2, int(64 * height / max(width, 1)))
    mask = Image.new("L", (small_w, small_h))
    norm = float(small_w * small_w + small_h * small_h)
    mask.putdata([
        int(255 * (x * small_w + y * small_h) / norm)
        for y in range(small_h)
        for x in range(small_w)
    ])
    mask = mask.resize((width, height), Image.Resampling.BILINEAR)
    start_img = Image.new("RGBA", (width, height), rgba(start))
    end_img = Image.new("RGBA", (width, height), rgba(end))
    return Image.composite(end_img, start_img, mask)


class FrameSurface:
    """
    Canvas RGBA mutável usado pelo renderer.

    Todas as operações desenham sobre ``self.image``; ``to_rgb_bytes``
    entrega o quadro no formato esperado pelo ffmpeg (rgb24).
    """

    def __init__(
        self,
        width: int,
        height: int,
        font_path: Optional[str] = None,
        bold_font_path: Optional[str] = None
    ):
        self.width = width
        self.height = height
        self.font_path = font_path
        self.bold_font_path = bold_font_path
        self.image = Image.new("RGBA", (width, height), (0, 0, 0, 255))
        self._fonts: Dict[Tuple[int, bool], ImageFont.ImageFont] = {}

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    # ============== FONTS ==============

    def font(self, size: int, bold: bool = False):
        """Retorna fonte em cache; sem TrueType disponível usa a default do Pillow."""
        size = max(1, int(size))
        key = (size, bold)
        if key in self._fonts:
            return self._fonts[key]

        configured = self.bold_font_path if bold else self.font_path
        candidates = ([configured] if configured else []) + DEFAULT_FONTS[bold]
        font = None
        for candidate in candidates:
            try:
                font = ImageFont.truetype(candidate, size)
                break
            except OSError:
                continue
        if font is None:
            logger.debug(f"No TrueType font found, using Pillow default at {size}px")
            font = ImageFont.load_default(size=size)

        self._fonts[key] = font
        return font

    def measure_text(self, text: str, font_size: int, bold: bool = False) -> float:
        return self.font(font_size, bold).getlength(text)

    def wrap_text(self, text: str, max_width: float, font_size: int, bold: bool = False) -> List[str]:
        """Quebra texto em linhas que cabem em max_width."""
        lines = []
        line = ""
        for word in text.split():
            candidate = f"{line} {word}" if line else word
            if line and self.measure_text(candidate, font_size, bold) > max_width:
                lines.append(line)
                line = word
            else:
                line = candidate
        if line:
            lines.append(line)
        return lines

    # ============== PRIMITIVES ==============

    def clear(self, color: str = "#000000"):
        self.image = Image.new("RGBA", self.size, rgba(color))

    def fill(self, color: str, alpha: float = 1.0):
        """Cobre o canvas inteiro com uma cor semitransparente."""
        if alpha <= 0:
            return
        layer = Image.new("RGBA", self.size, rgba(color, alpha))
        self.image = Image.alpha_composite(self.image, layer)

    def fill_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        color: str,
        alpha: float = 1.0,
        radius: int = 0
    ):
        if alpha <= 0 or width <= 0 or height <= 0:
            return
        x0, y0 = int(round(x)), int(round(y))
        w, h = max(1, int(round(width))), max(1, int(round(height)))
        layer = Image.new("RGBA", (w, h), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        if radius > 0:
            draw.rounded_rectangle((0, 0, w - 1, h - 1), radius=radius, fill=rgba(color, alpha))
        else:
            draw.rectangle((0, 0, w - 1, h - 1), fill=rgba(color, alpha))
        self._composite_at(layer, x0, y0)

    def fill_circle(self, cx: float, cy: float, radius: float, color: str, alpha: float = 1.0):
        if alpha <= 0 or radius <= 0:
            return
        r = int(round(radius))
        layer = Image.new("RGBA", (2 * r + 1, 2 * r + 1), (0, 0, 0, 0))
        ImageDraw.Draw(layer).ellipse((0, 0, 2 * r, 2 * r), fill=rgba(color, alpha))
        self._composite_at(layer, int(round(cx)) - r, int(round(cy)) - r)

    def linear_gradient(self, start: str, end: str):
        self.image = gradient_image(self.size, start, end)

    def draw_image(
        self,
        image: Image.Image,
        x: float = 0,
        y: float = 0,
        scale: float = 1.0,
        alpha: float = 1.0,
        clip: Optional[Clip] = None,
        blend: str = "normal"
    ):
        """
        Desenha uma imagem do tamanho do canvas.

        Args:
            image: Imagem (redimensionada para o canvas se necessário)
            x, y: Deslocamento em pixels
            scale: Escala em torno do centro do canvas
            alpha: Opacidade global (0-1)
            clip: ("rect", x, y, w, h) ou ("circle", cx, cy, r)
            blend: "normal" ou "screen"
        """
        if alpha <= 0:
            return

        source = image if image.size == self.size else image.resize(self.size, Image.Resampling.BILINEAR)
        source = source.convert("RGBA")

        if scale != 1.0:
            scaled_w = max(1, int(round(self.width * scale)))
            scaled_h = max(1, int(round(self.height * scale)))
            source = source.resize((scaled_w, scaled_h), Image.Resampling.BILINEAR)
        dest_x = int(round((self.width - source.width) / 2 + x))
        dest_y = int(round((self.height - source.height) / 2 + y))

        layer = Image.new("RGBA", self.size, (0, 0, 0, 0))
        layer.paste(source, (dest_x, dest_y))

        mask = layer.getchannel("A")
        if alpha < 1.0:
            mask = mask.point(lambda value: int(value * alpha))
        if clip is not None:
            mask = ImageChops.multiply(mask, self._clip_mask(clip))

        if blend == "screen":
            screened = ImageChops.screen(self.image.convert("RGB"), layer.convert("RGB")).convert("RGBA")
            self.image = Image.composite(screened, self.image, mask)
        else:
            layer.putalpha(mask)
            self.image = Image.alpha_composite(self.image, layer)

    def draw_image_rect(
        self,
        image: Image.Image,
        x: float,
        y: float,
        width: float,
        height: float,
        alpha: float = 1.0
    ):
        """Desenha uma imagem esticada no retângulo informado."""
        if alpha <= 0 or width < 1 or height < 1:
            return
        layer = image.convert("RGBA").resize(
            (int(round(width)), int(round(height))), Image.Resampling.BILINEAR
        )
        if alpha < 1.0:
            layer.putalpha(layer.getchannel("A").point(lambda value: int(value * alpha)))
        self._composite_at(layer, int(round(x)), int(round(y)))

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        style: TextStyle,
        alpha: float = 1.0,
        scale: float = 1.0,
        fill: Optional[str] = None,
        font_size: Optional[int] = None,
        align: Optional[TextAlign] = None
    ):
        """Desenha texto ancorado na linha de base em (x, y)."""
        if not text or alpha <= 0 or scale <= 0:
            return
        size = max(1, int(round((font_size or style.font_size) * scale)))
        font = self.font(size, style.bold)
        anchor = ANCHORS[align or style.align]
        stroke_width = int(round(style.stroke_width * scale)) if style.stroke else 0

        left, top, right, bottom = ImageDraw.Draw(self.image).textbbox(
            (0, 0), text, font=font, anchor=anchor, stroke_width=stroke_width
        )
        layer = Image.new("RGBA", (max(1, right - left), max(1, bottom - top)), (0, 0, 0, 0))
        ImageDraw.Draw(layer).text(
            (-left, -top),
            text,
            font=font,
            anchor=anchor,
            fill=rgba(fill or style.fill, alpha),
            stroke_width=stroke_width,
            stroke_fill=rgba(style.stroke, alpha) if style.stroke else None,
        )
        self._composite_at(layer, int(round(x)) + left, int(round(y)) + top)

    # ============== OUTPUT ==============

    def to_image(self) -> Image.Image:
        return self.image.convert("RGB")

    def to_rgb_bytes(self) -> bytes:
        return self.image.convert("RGB").tobytes()

    # ============== HELPERS ==============

    def _clip_mask(self, clip: Clip) -> Image.Image:
        mask = Image.new("L", self.size, 0)
        draw = ImageDraw.Draw(mask)
        if clip[0] == "circle":
            _, cx, cy, r = clip
            if r > 0:
                draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=255)
        else:
            _, x, y, w, h = clip
            if w > 0 and h > 0:
                draw.rectangle((x, y, x + w - 1, y + h - 1), fill=255)
        return mask

    def _composite_at(self, layer: Image.Image, x: int, y: int):
        """alpha_composite em (x, y), recortando o que cair fora do canvas."""
        crop_left = max(0, -x)
        crop_top = max(0, -y)
        crop_right = min(layer.width, self.width - x)
        crop_bottom = min(layer.height, self.height - y)
        if crop_right <= crop_left or crop_bottom <= crop_top:
            return
        if (crop_left, crop_top, crop_right, crop_bottom) != (0, 0, layer.width, layer.height):
            layer = layer.crop((crop_left, crop_top, crop_right, crop_bottom))
        self.image.alpha_composite(layer, dest=(x + crop_left, y + crop_top))
