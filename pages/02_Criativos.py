from page_helpers import start_page
from view_creatives import page_creatives

engine = start_page("Criativos")
page_creatives(engine)
