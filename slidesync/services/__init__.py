"""
Services: infrastructure (LLM, parsing), pipeline stages and use cases.
"""
