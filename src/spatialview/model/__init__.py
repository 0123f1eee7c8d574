"""
The MODEL layer contains pure data structures and the ingestion pipeline.
It has NO knowledge of the GUI (Qt) or the rendering surface.
It deals with file formats, geometry and log events.
"""
