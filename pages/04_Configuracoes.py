from page_helpers import start_page
from view_settings import page_settings

engine = start_page("Configurações")
page_settings(engine)
