"""Streaming structured summaries for arXiv papers.

The package wires HTML extraction, prompt construction, a streaming
chat-completion client and local persistence into a small toolkit that
can be driven from the command line or embedded in another host.
"""

__all__: list[str] = []
