"""
Services: routing providers, caching, batching, repositories and the match engine.
"""
