"""s3ferry action modules

Each action class provides do_action() and do_dry_run() methods.
"""

from s3ferry.actions.receive import Receive
from s3ferry.actions.send import Send
from s3ferry.actions.transfer import Transfer

__all__ = [
    "Receive",
    "Send",
    "Transfer",
]
