"""
llm-summarize — summarise local text files with a locally hosted LLM.

Reads one or more files, sends them to an OpenAI-compatible chat-completion
endpoint (llama-server / Ollama on ``localhost:11434`` by default) and shows
the returned Markdown summary in the terminal with save/copy/retry/theme
actions.
"""

__version__ = "0.1.0"
