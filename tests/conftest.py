from datetime import datetime

import pytest

from statement_templates import DEFAULT_REGISTRY

FIXED_NOW = datetime(2025, 6, 30, 9, 30)

HDFC_CSV = (
    "Date,Narration,Debit,Credit,Balance\n"
    '2024-01-01,Salary,,"50,000.00","1,50,000.00"\n'
    '2024-01-05,Rent,"20,000.00",,"1,30,000.00"\n'
    '2024-01-20,Coffee,250.00,,"1,29,750.00"\n'
)

BANK_OFX = """OFXHEADER:100
DATA:OFXSGML
<OFX>
<BANKMSGSRSV1><STMTTRNRS><STMTRS>
<BANKTRANLIST>
<STMTTRN>
<TRNTYPE>CREDIT
<DTPOSTED>20240101120000[-5:EST]
<TRNAMT>1500.00
<NAME>Payroll
</STMTTRN>
<STMTTRN>
<TRNTYPE>DEBIT
<DTPOSTED>20240110
<TRNAMT>-200.50
<MEMO>Groceries
<NAME>Store
</STMTTRN>
</BANKTRANLIST>
<LEDGERBAL>
<BALAMT>5,299.50
<DTASOF>20240131
</LEDGERBAL>
</STMTRS></STMTTRNRS></BANKMSGSRSV1>
</OFX>
"""


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def registry():
    return DEFAULT_REGISTRY


@pytest.fixture
def hdfc_csv():
    return HDFC_CSV


@pytest.fixture
def bank_ofx():
    return BANK_OFX
