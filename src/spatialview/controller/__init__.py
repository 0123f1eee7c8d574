"""
The CONTROLLER layer glues file ingestion to the views: it runs decodes in the
background and decides whether a finished result may still reach a session.
"""
