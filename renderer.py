# renderer.py
import logging

import requests

logger = logging.getLogger(__name__)

XLSX_MIME = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


class RenderError(Exception):
    pass


def _error_message(resp) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        msg = body.get('details') or body.get('error')
        if msg:
            return str(msg)
    text = (resp.text or '').strip()
    return text or f'HTTP {resp.status_code}'


class RenderClient:
    """Sends a filled workbook to the spreadsheet -> PDF conversion service.

    One request per call; a failure is reported to the caller as RenderError
    and never retried here.
    """

    def __init__(self, url: str, timeout: float = 120, session=None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def convert(self, data: bytes) -> bytes:
        logger.info('Sending %d bytes to %s', len(data), self.url)
        try:
            resp = self.session.post(self.url, data=data,
                                     headers={'Content-Type': XLSX_MIME},
                                     timeout=self.timeout)
        except requests.RequestException as e:
            raise RenderError(str(e)) from e
        if not resp.ok:
            msg = _error_message(resp)
            logger.warning('Conversion failed (%s): %s', resp.status_code, msg)
            raise RenderError(msg)
        return resp.content

    def health(self) -> bool:
        base = self.url.split('/api/', 1)[0]
        try:
            resp = self.session.get(f'{base}/api/health', timeout=5)
        except requests.RequestException:
            return False
        return resp.ok
