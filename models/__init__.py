"""
Client loader package for the food nutrition analysis service.

Exposes a cached accessor for the OpenAI vision client (`get_vision_client`).
"""
