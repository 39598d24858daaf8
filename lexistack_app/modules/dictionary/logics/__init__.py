from .entry_parser import audio_url, clean_markup, parse_entry

__all__ = ['audio_url', 'clean_markup', 'parse_entry']
