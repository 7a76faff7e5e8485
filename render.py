"""
╔══════════════════════════════════════════════════════════════════╗
║            B-Tree Debugger — RENDER SURFACE                      ║
║                                                                  ║
║  Draws a highlighted Layout onto any 2D immediate-mode context.  ║
║                                                                  ║
║  Contexts                                                        ║
║  ────────                                                        ║
║    CanvasContext  — live tkinter Canvas (debugger window)        ║
║    ImageContext   — off-screen Pillow image (PNG export)         ║
║                                                                  ║
║  Both expose the same four calls:                                ║
║    clear(color) · fill_rect(x, y, w, h, color)                   ║
║    fill_text(text, x, y, color, size) · size()                   ║
║                                                                  ║
║  Drawing order: every node background first, then every cell,    ║
║  so no cell is ever hidden behind a later node.                  ║
╚══════════════════════════════════════════════════════════════════╝
"""

import logging

from PIL import Image, ImageDraw, ImageFont

from layout import Layout, LayoutConfig, layout_extent
from settings import HIGHLIGHT_KEYS, THEMES

log = logging.getLogger(__name__)


def default_palette(theme="light"):
    """HighlightKind → colour for a built-in theme (no user overrides)."""
    colors = THEMES[theme]
    return {kind: colors[key] for kind, key in HIGHLIGHT_KEYS.items()}


# ═════════════════════════════════════════════════════════════════
#  TKINTER CANVAS CONTEXT
# ═════════════════════════════════════════════════════════════════
class CanvasContext:
    """
    Immediate-mode wrapper over a ``tkinter.Canvas``.

    Every call creates canvas items; ``clear`` deletes them all.
    Text sizes are pixels (Tk interprets a negative size as pixels).
    """

    FONT_FAMILY = "Arial"

    def __init__(self, canvas):
        self.canvas = canvas

    def size(self):
        c = self.canvas
        return max(c.winfo_width(), 1), max(c.winfo_height(), 1)

    def clear(self, color):
        self.canvas.delete("all")
        w, h = self.size()
        self.canvas.create_rectangle(0, 0, w, h, fill=color, outline="")

    def fill_rect(self, x, y, w, h, color):
        self.canvas.create_rectangle(x, y, x + w, y + h, fill=color, outline="")

    def fill_text(self, text, x, y, color, size):
        self.canvas.create_text(x, y, text=text, fill=color, anchor="center",
                                font=(self.FONT_FAMILY, -int(size)))


# ═════════════════════════════════════════════════════════════════
#  PILLOW IMAGE CONTEXT
# ═════════════════════════════════════════════════════════════════
class ImageContext:
    """
    Off-screen context drawing into a Pillow RGB image.

    Args:
        image (PIL.Image.Image): Target image, drawn in place.
    """

    FONT_CANDIDATES = [
        "arial.ttf",                                           # Windows
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",     # Debian/Ubuntu
        "/usr/share/fonts/TTF/DejaVuSans.ttf",                 # Arch
        "/System/Library/Fonts/Helvetica.ttc",                 # macOS
    ]

    def __init__(self, image):
        self.image = image
        self.draw = ImageDraw.Draw(image)
        self._fonts = {}

    def _font(self, size):
        size = int(size)
        font = self._fonts.get(size)
        if font is not None:
            return font
        for path in self.FONT_CANDIDATES:
            try:
                font = ImageFont.truetype(path, size)
                break
            except OSError:
                continue
        if font is None:
            font = ImageFont.load_default(size=size)
        self._fonts[size] = font
        return font

    def size(self):
        return self.image.size

    def clear(self, color):
        w, h = self.image.size
        self.draw.rectangle([0, 0, w, h], fill=color)

    def fill_rect(self, x, y, w, h, color):
        if w < 1 or h < 1:
            return
        self.draw.rectangle([x, y, x + w - 1, y + h - 1], fill=color)

    def fill_text(self, text, x, y, color, size):
        font = self._font(size)
        bb = self.draw.textbbox((0, 0), text, font=font)
        tw, th = bb[2] - bb[0], bb[3] - bb[1]
        self.draw.text((x - tw / 2 - bb[0], y - th / 2 - bb[1]), text,
                       fill=color, font=font)


# ═════════════════════════════════════════════════════════════════
#  RENDER SURFACE
# ═════════════════════════════════════════════════════════════════
class RenderSurface:
    """
    Stateless pass that paints a Layout.

    Args:
        ctx        : CanvasContext / ImageContext (or anything with the
                     same four methods).
        config     (LayoutConfig): Geometry the layout was built with.
        palette    (dict)        : HighlightKind → fill colour.
        background (str)         : Canvas clear colour.
        text_color (str)         : Key label colour.
    """

    def __init__(self, ctx, config=None, palette=None,
                 background="#ffffff", text_color="#000000"):
        self.ctx = ctx
        self.config = config or LayoutConfig()
        self.palette = palette or default_palette()
        self.background = background
        self.text_color = text_color

    @property
    def font_size(self):
        return self.config.cell_height * 0.6

    def render(self, layout: Layout, node_capacity: int) -> None:
        cfg, ctx = self.config, self.ctx
        ctx.clear(self.background)

        # ── node backgrounds, centred on the full key strip ──
        # capacity 0 would give a negative strip
        strip_w = max(cfg.node_width(node_capacity), 0)
        box_w = strip_w * cfg.node_border_factor
        box_h = cfg.cell_height * cfg.node_height_factor
        for node in layout.nodes:
            x_center = node.x + strip_w / 2.0
            ctx.fill_rect(x_center - box_w / 2, node.y - box_h / 2,
                          box_w, box_h, self.palette[node.highlight])

        # ── key cells on top ──
        for cell in layout.cells:
            ctx.fill_rect(cell.x - cfg.half_cell_width,
                          cell.y - cfg.half_cell_height,
                          cfg.cell_width, cfg.cell_height,
                          self.palette[cell.highlight])
            ctx.fill_text(str(cell.key), cell.x, cell.y,
                          self.text_color, self.font_size)

    def placeholder(self, text):
        """Clear and show a centred message (no snapshot yet)."""
        self.ctx.clear(self.background)
        w, h = self.ctx.size()
        self.ctx.fill_text(text, w / 2, h / 2, self.text_color, 16)


# ═════════════════════════════════════════════════════════════════
#  PNG EXPORT
# ═════════════════════════════════════════════════════════════════
def render_image(layout, node_capacity, config=None, palette=None,
                 background="#ffffff", text_color="#000000", margin=20):
    """
    Render a layout to a new Pillow image sized to fit it.

    Returns:
        PIL.Image.Image
    """
    config = config or LayoutConfig()
    max_x, max_y = layout_extent(layout, node_capacity, config)
    img = Image.new("RGB", (int(max_x + margin), int(max_y + margin)), background)
    RenderSurface(ImageContext(img), config, palette,
                  background, text_color).render(layout, node_capacity)
    return img


def export_png(path, layout, node_capacity, **kwargs):
    img = render_image(layout, node_capacity, **kwargs)
    img.save(path, "PNG")
    log.info("exported layout to %s (%dx%d)", path, *img.size)
    return img
