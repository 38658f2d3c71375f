"""Collections (folders) of spreadsheets."""

from .feed import codec
from .shared.consts import FOLDER_FEED_URL_PREFIX, GDATA_V3_HEADER, REL_WORKSHEETS_FEED
from .shared.remote import RemoteAccess
from .shared.utils import concat_url
from .spreadsheet import Spreadsheet


class Collection:
    """Use ``Session.collection_by_url`` to get a Collection."""

    def __init__(self, session: RemoteAccess, collection_feed_url: str) -> None:
        self.session = session
        # A browser address bar URL of a folder is turned into its feed URL.
        if "folders/" in collection_feed_url:
            folder_id = collection_feed_url.split("folders/")[-1]
            collection_feed_url = FOLDER_FEED_URL_PREFIX + folder_id
        self.collection_feed_url = collection_feed_url

    @property
    def contents_url(self) -> str:
        return concat_url(self.collection_feed_url, "/contents")

    def add(self, spreadsheet: Spreadsheet) -> None:
        body = codec.build_document_reference(spreadsheet.document_feed_url)
        self.session.request(
            "POST", self.contents_url, data=body, header=dict(GDATA_V3_HEADER), auth="writely"
        )

    def spreadsheets(self) -> list[Spreadsheet]:
        doc = self.session.request(
            "GET", self.contents_url, header=dict(GDATA_V3_HEADER), auth="writely"
        )
        # Non-spreadsheet documents in the folder have no worksheets feed.
        return [
            Spreadsheet(
                self.session,
                entry.link(REL_WORKSHEETS_FEED),
                entry.title,
                getattr(self.session, "config", None),
            )
            for entry in codec.decode_entries(doc)
            if entry.link(REL_WORKSHEETS_FEED)
        ]
