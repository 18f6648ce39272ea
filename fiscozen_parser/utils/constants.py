"""
Fiscozen API constants.

Paths, query defaults and the fixed invoicing profile used when relaying
calls to the provider's private web API.
"""

# Unauthenticated pages probed (in order) to obtain the CSRF cookie
LANDING_PATHS = ("/", "/auth/login/", "/login/", "/accounts/login/")

LOGIN_PATH = "/api/v1/auth/login/"
CUSTOMERS_PATH = "/api/v1/customers/"
CUSTOMER_DETAIL_PATH = "/api/v1/customers/{customer_id}/"
INVOICES_PATH = "/api/v1/invoices/"

CSRF_COOKIE_PATTERN = r"csrftoken=([^;]+)"

SEARCH_PAGE = 1
SEARCH_PAGE_SIZE = 25

# The provider supports Italian customers only
CUSTOMER_COUNTRY = "Italia"
CUSTOMER_TYPE_COMPANY = "Società"

DEFAULT_CURRENCY = "EUR"
FISCAL_REGIME = "Forfettario"

# Single supported exemption profile: operations outside the scope of VAT
# under articles 7 to 7-septies of DPR 633/1972, applied to every row.
EXEMPTION_PROFILE = {
    "id": 24,
    "law": (
        "OPERAZIONI NON SOGGETTE A IVA AI SENSI DEGLI ARTICOLI "
        "DA 7 A 7-SEPTIES DEL DPR 633/1972"
    ),
    "code": "NS7",
    "kind": "N2.2",
    "value": "0.00",
    "invoice_note": (
        "Operazioni non soggette a Iva ai sensi degli articoli "
        "da 7 a 7-septies del Dpr 633/1972"
    ),
    "readable_value": "–",
}

# Regime flags sent unchanged with every invoice
INVOICE_REGIME_FLAGS = {
    "payment_method": None,
    "service_kind": "",
    "enasarco_rate": 0,
    "welfare_perc": "0%",
    "add_welfare_row": False,
    "add_tax_stamp_row": False,
    "ex_enpals_applied": False,
    "welfare_applicable": False,
    "tax_stamp_applicable": False,
    "withholding_tax_applicable": False,
}

# Referers the provider's web app sends for each area
REFERER_HOME = "/"
REFERER_CUSTOMERS = "/app/clienti"
REFERER_NEW_INVOICE = "/app/fatture/nuova"
