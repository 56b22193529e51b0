# src/main.py          <-- keep it at the top level of the deployed source
# Entry point:  hello_pubsub
#
# What it does:
#   • Decodes the Pub/Sub message data (base64, UTF-8)
#   • Logs "Hello, {name}!" ("World" when there is no data)

from hello_pubsub.app import hello_pubsub

__all__ = ["hello_pubsub"]
