"""Tests for the NACHA record encoder."""

from __future__ import annotations

import pytest

from payrail.core.exceptions import NachaValidationError
from payrail.nacha import encoder
from tests.fakes import CREATED_AT, ODFI_ID8, make_batch, make_entry, make_header


class TestFileHeader:
    def test_layout(self):
        record = encoder.file_header_record(make_header(), CREATED_AT)
        assert len(record) == 94
        assert record[0:3] == "101"
        assert record[3:13] == " 021000021"
        assert record[13:23] == "1234567890"
        assert record[23:29] == "240314"
        assert record[29:33] == "1509"
        assert record[33] == "A"
        assert record[34:40] == "094101"
        assert record[40:63] == "FEDERAL RESERVE BANK   "
        assert record[63:86] == "ACME PAYROLL LLC       "
        assert record[86:94] == " " * 8

    def test_bare_routing_gets_leading_space(self):
        record = encoder.file_header_record(make_header(immediate_dest="021000021"), CREATED_AT)
        assert record[3:13] == " 021000021"

    def test_long_names_truncated(self):
        record = encoder.file_header_record(make_header(dest_name="X" * 40), CREATED_AT)
        assert record[40:63] == "X" * 23
        assert len(record) == 94

    def test_non_numeric_destination_rejected(self):
        with pytest.raises(NachaValidationError):
            encoder.file_header_record(make_header(immediate_dest=" 02100002X"), CREATED_AT)

    def test_bad_file_id_modifier_rejected(self):
        with pytest.raises(NachaValidationError):
            encoder.file_header_record(make_header(file_id_mod="ab"), CREATED_AT)


class TestBatchHeader:
    def test_layout(self):
        record = encoder.batch_header_record(make_batch([make_entry()]), 3)
        assert len(record) == 94
        assert record[0:4] == "5200"
        assert record[4:20] == "ACME PAYROLL    "
        assert record[20:40] == " " * 20
        assert record[40:50] == "1234567890"
        assert record[50:53] == "PPD"
        assert record[53:63] == "PAYROLL   "
        assert record[63:69] == " " * 6
        assert record[69:75] == "240315"
        assert record[75:78] == "   "
        assert record[78] == "1"
        assert record[79:87] == ODFI_ID8
        assert record[87:94] == "0000003"

    @pytest.mark.parametrize("odfi", ["0210000", "0210000X", "021000021"])
    def test_bad_odfi_rejected(self, odfi):
        with pytest.raises(NachaValidationError):
            encoder.batch_header_record(make_batch([make_entry()], odfi_id8=odfi), 1)

    @pytest.mark.parametrize("date", ["24031", "241315", "2403AB"])
    def test_bad_effective_date_rejected(self, date):
        with pytest.raises(NachaValidationError):
            encoder.batch_header_record(make_batch([make_entry()], effective_date_yymmdd=date), 1)


class TestEntryDetail:
    def test_layout(self):
        record = encoder.entry_detail_record(make_entry(42), ODFI_ID8)
        assert len(record) == 94
        assert record[0] == "6"
        assert record[1:3] == "22"
        assert record[3:11] == "02100002"
        assert record[11] == "1"
        assert record[12:29] == "123456789        "
        assert record[29:39] == "0000000150"
        assert record[39:54] == "EMP0001        "
        assert record[54:76] == "ADA LOVELACE          "
        assert record[76:78] == "  "
        assert record[78] == "0"
        assert record[79:94] == ODFI_ID8 + "0000042"

    def test_name_truncated_to_22_and_uppercased(self):
        entry = make_entry(name="Maximilian Alexander Featherstonehaugh")
        record = encoder.entry_detail_record(entry, ODFI_ID8)
        assert record[54:76] == "MAXIMILIAN ALEXANDER F"

    def test_non_ascii_name_folded(self):
        record = encoder.entry_detail_record(make_entry(name="José Núñez"), ODFI_ID8)
        assert record[54:76].rstrip() == "JOSE NUNEZ"

    @pytest.mark.parametrize("routing", ["02100002", "0210000211", "02100002A", ""])
    def test_bad_routing_rejected(self, routing):
        with pytest.raises(NachaValidationError):
            encoder.entry_detail_record(make_entry(routing=routing), ODFI_ID8)

    @pytest.mark.parametrize("amount", [0, -100, 10_000_000_000])
    def test_bad_amount_rejected(self, amount):
        with pytest.raises(NachaValidationError):
            encoder.entry_detail_record(make_entry(amount_cents=amount), ODFI_ID8)

    def test_largest_amount_fits(self):
        record = encoder.entry_detail_record(make_entry(amount_cents=9_999_999_999), ODFI_ID8)
        assert record[29:39] == "9999999999"

    def test_trace_overflow_rejected(self):
        with pytest.raises(NachaValidationError):
            encoder.entry_detail_record(make_entry(10_000_000), ODFI_ID8)

    def test_blank_account_rejected(self):
        with pytest.raises(NachaValidationError):
            encoder.validate_entry(make_entry(account="   "))

    def test_account_longer_than_17_rejected(self):
        with pytest.raises(NachaValidationError):
            encoder.validate_entry(make_entry(account="1" * 18))
        with pytest.raises(NachaValidationError):
            encoder.entry_detail_record(make_entry(account="1" * 18), ODFI_ID8)

    def test_account_of_17_fits(self):
        record = encoder.entry_detail_record(make_entry(account="1" * 17), ODFI_ID8)
        assert record[12:29] == "1" * 17


class TestControlRecords:
    def test_batch_hash_sums_routing_prefixes(self):
        entries = [make_entry(1, routing="123456789"), make_entry(2, routing="876543210")]
        totals = encoder.control_totals(entries)
        assert totals.entry_hash == (12345678 + 87654321) % 10_000_000_000
        assert totals.entry_hash == 99999999

    def test_batch_hash_wraps_at_ten_digits(self):
        entries = [make_entry(i, routing="999999999") for i in range(1, 102)]
        record = encoder.batch_control_record(make_batch(entries), 1)
        assert record[10:20] == "0099999899"

    def test_batch_control_layout(self):
        entries = [make_entry(1, amount_cents=150), make_entry(2, amount_cents=250, routing="011000015")]
        record = encoder.batch_control_record(make_batch(entries), 1)
        assert len(record) == 94
        assert record[0:4] == "8200"
        assert record[4:10] == "000002"
        assert record[10:20] == str(2100002 + 1100001).zfill(10)
        assert record[20:32] == "0" * 12
        assert record[32:44] == "000000000400"
        assert record[44:54] == "1234567890"
        assert record[54:79] == " " * 25
        assert record[79:87] == ODFI_ID8
        assert record[87:94] == "0000001"

    def test_file_hash_folds_every_entry_across_batches(self):
        big = [make_entry(i, routing="999999999") for i in range(1, 102)]
        batches = [make_batch(big), make_batch(big)]
        record = encoder.file_control_record(batches, 1)
        assert record[21:31] == str((202 * 99999999) % 10_000_000_000).zfill(10)

    def test_file_control_layout(self):
        batches = [make_batch([make_entry(1)]), make_batch([make_entry(2), make_entry(3)])]
        record = encoder.file_control_record(batches, 2)
        assert len(record) == 94
        assert record[0:7] == "9000002"
        assert record[7:13] == "000002"
        assert record[13:21] == "00000003"
        assert record[21:31] == str(3 * 2100002).zfill(10)
        assert record[31:43] == "0" * 12
        assert record[43:55] == "000000000450"
        assert record[55:94] == " " * 39


class TestBlocking:
    @pytest.mark.parametrize("records,fill,blocks", [(5, 5, 1), (10, 0, 1), (11, 9, 2), (20, 0, 2)])
    def test_block_fill_and_count(self, records, fill, blocks):
        assert len(encoder.block_fill(records)) == fill
        assert encoder.block_count(records) == blocks

    def test_filler_is_94_nines(self):
        assert encoder.FILLER_RECORD == "9" * 94
