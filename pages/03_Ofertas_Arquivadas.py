from page_helpers import start_page
from view_archived import page_archived_offers

engine = start_page("Ofertas arquivadas")
page_archived_offers(engine)
