"""
slidesync - script-to-slide alignment engine.

Segments a speaking script into per-slide sections, aligns it to analysed
slides with AI assistance, and produces coaching for each slide.
"""

__version__ = "1.0.0"
