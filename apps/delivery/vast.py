# apps/delivery/vast.py
"""
VAST 3.0 response rendering.

Each ad becomes one InLine entry with a single linear creative and a single
progressive MP4 media file. An empty selection still renders a complete
document: a VAST root with no Ad children.
"""
from io import StringIO

from django.conf import settings
from django.utils.xmlutils import SimplerXMLGenerator

VAST_VERSION = "3.0"
MEDIA_DELIVERY = "progressive"
MEDIA_TYPE = "video/mp4"
MEDIA_WIDTH = 1280
MEDIA_HEIGHT = 720


def format_duration(seconds):
    """Whole seconds as a zero padded HH:MM:SS timecode."""
    if seconds < 0:
        raise ValueError(f"duration cannot be negative: {seconds}")
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _impression_url(ad):
    template = settings.VAST_IMPRESSION_URL
    return template.format(ad_id=ad.id) if template else ""


def _write_ad(xml, ad):
    xml.startElement("Ad", {"id": str(ad.id)})
    xml.startElement("InLine", {})
    xml.addQuickElement("AdSystem", settings.VAST_AD_SYSTEM)
    xml.addQuickElement("AdTitle", settings.VAST_AD_TITLE)
    impression_url = _impression_url(ad)
    if impression_url:
        xml.addQuickElement("Impression", impression_url)

    xml.startElement("Creatives", {})
    xml.startElement("Creative", {"id": str(ad.creative_id)})
    xml.startElement("Linear", {})
    xml.addQuickElement("Duration", format_duration(ad.duration_seconds))
    xml.startElement("MediaFiles", {})
    xml.addQuickElement("MediaFile", ad.media_url, {
        "delivery": MEDIA_DELIVERY,
        "type": MEDIA_TYPE,
        "width": str(MEDIA_WIDTH),
        "height": str(MEDIA_HEIGHT),
    })
    xml.endElement("MediaFiles")
    xml.endElement("Linear")
    xml.endElement("Creative")
    xml.endElement("Creatives")

    xml.endElement("InLine")
    xml.endElement("Ad")


def render_vast(ads):
    """Render ads (in order) as a VAST document string with an XML declaration."""
    stream = StringIO()
    xml = SimplerXMLGenerator(stream, "utf-8")
    xml.startDocument()
    xml.startElement("VAST", {"version": VAST_VERSION})
    for ad in ads:
        _write_ad(xml, ad)
    xml.endElement("VAST")
    xml.endDocument()
    return stream.getvalue()
