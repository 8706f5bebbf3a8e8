"""
Gap Writer core package.

Modules
───────
models  — Pydantic data models (SearchResult, ContentGap, BlogPost)
errors  — RelayError taxonomy and the JSON error envelope
gaps    — deterministic content-gap suggestions for a keyword
search  — Brave Search relay
writer  — blog post completion relay (Together, Anthropic)
saved   — session-held saved gaps
export  — Markdown download naming and HTML rendering
"""
