"""
Locale string tables for the views.

Keys are dotted paths (``menu.agenda.menu``). Lookups fall back to English and
then to the key itself so a missing translation never breaks a page.
"""
from __future__ import annotations

from typing import Dict

from correspondence.core.config import settings

DEFAULT_LOCALE = "en"

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        "menu.agenda.menu": "Agenda",
        "menu.agenda.incoming_letter": "Incoming Letter",
        "menu.transaction.incoming_letter": "Incoming Letter",
        "menu.general.success": "Data saved successfully",
        "menu.general.search": "Search",
        "menu.general.create": "Create",
        "menu.general.edit": "Edit",
        "menu.general.delete": "Delete",
        "menu.general.show": "Show",
        "menu.general.save": "Save",
        "menu.general.print": "Print",
        "menu.general.empty": "No data",
        "model.letter.reference_number": "Reference Number",
        "model.letter.agenda_number": "Agenda Number",
        "model.letter.from": "From",
        "model.letter.to": "To",
        "model.letter.letter_date": "Letter Date",
        "model.letter.received_date": "Received Date",
        "model.letter.description": "Description",
        "model.letter.note": "Note",
        "model.letter.classification_code": "Classification",
        "model.letter.attachments": "Attachments",
        "model.letter.created_by": "Created By",
        "model.letter.since": "Since",
        "model.letter.until": "Until",
        "model.letter.filter": "Filter by",
    },
    "id": {
        "menu.agenda.menu": "Agenda",
        "menu.agenda.incoming_letter": "Surat Masuk",
        "menu.transaction.incoming_letter": "Surat Masuk",
        "menu.general.success": "Data berhasil disimpan",
        "menu.general.search": "Cari",
        "menu.general.create": "Tambah",
        "menu.general.edit": "Ubah",
        "menu.general.delete": "Hapus",
        "menu.general.show": "Lihat",
        "menu.general.save": "Simpan",
        "menu.general.print": "Cetak",
        "menu.general.empty": "Tidak ada data",
        "model.letter.reference_number": "Nomor Surat",
        "model.letter.agenda_number": "Nomor Agenda",
        "model.letter.from": "Pengirim",
        "model.letter.to": "Penerima",
        "model.letter.letter_date": "Tanggal Surat",
        "model.letter.received_date": "Tanggal Diterima",
        "model.letter.description": "Ringkasan",
        "model.letter.note": "Keterangan",
        "model.letter.classification_code": "Klasifikasi",
        "model.letter.attachments": "Lampiran",
        "model.letter.created_by": "Dibuat Oleh",
        "model.letter.since": "Dari Tanggal",
        "model.letter.until": "Sampai Tanggal",
        "model.letter.filter": "Filter berdasarkan",
    },
}


def current_locale() -> str:
    return settings.app_locale if settings.app_locale in TRANSLATIONS else DEFAULT_LOCALE


def trans(key: str, locale: str | None = None) -> str:
    """Look up ``key`` for ``locale`` (defaults to the configured one)."""
    table = TRANSLATIONS.get(locale or current_locale(), {})
    if key in table:
        return table[key]
    return TRANSLATIONS[DEFAULT_LOCALE].get(key, key)
