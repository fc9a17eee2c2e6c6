"""
FastAPI API layer for the food nutrition analysis service.

Exposes:
- `/api/analyze-food` : base64 data URL image -> meal nutrition totals
- `/graph/ascii`      : ASCII diagram of the LangGraph pipeline
- `/graph/mermaid`    : Mermaid graph source for visualization
- `/health`           : Basic health check
"""
