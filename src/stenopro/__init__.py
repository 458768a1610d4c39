"""Audio transcription and correction pipeline for parliamentary sessions."""
