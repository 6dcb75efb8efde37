"""Supabase infrastructure module"""
from .client import create_auth_client, get_supabase_client, reset_supabase_client
from .errors import BackendUnavailable, DeleteFailed, StoreError, UploadFailed

__all__ = [
    'create_auth_client',
    'get_supabase_client',
    'reset_supabase_client',
    'StoreError',
    'BackendUnavailable',
    'UploadFailed',
    'DeleteFailed',
]
