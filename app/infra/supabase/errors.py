"""Errors raised by the Supabase repositories"""


class StoreError(Exception):
    """Base class for remote store failures"""

    user_message = "Something went wrong talking to the server. Please try again."


class BackendUnavailable(StoreError):
    """A table call failed at the transport or server level"""

    user_message = "Could not reach the notes service. Please try again."


class UploadFailed(StoreError):
    """An attachment upload failed"""

    user_message = "Uploading attachments failed. Please try again."


class DeleteFailed(StoreError):
    """An attachment removal failed"""

    user_message = "Removing the attachment failed. Please try again."
