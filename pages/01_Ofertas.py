from page_helpers import start_page
from view_offers import page_offers

engine = start_page("Ofertas")
page_offers(engine)
