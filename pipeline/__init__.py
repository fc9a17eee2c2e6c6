"""
Pipeline package for the food nutrition analysis service.

Contains:
- `state`   : Typed `AnalysisState` definition
- `prompts` : Fixed instruction prompt sent with every image
- `tools`   : LangChain tool wrapping the OpenAI vision call
- `nodes`   : LangGraph node callables operating over `AnalysisState`
- `graph`   : StateGraph builder and compiled `pipeline`
"""
