"""
Services module: catalog use-cases and query composition
"""
