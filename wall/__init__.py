"""Wall: a shared real-time feed of short posts backed by Supabase."""

__version__ = "0.1.0"
