"""
Daily REST client - creates the real video room behind a paired VideoRoom

Architecture:
    Pairing Engine → VideoRoom row (no URL) → DailyRoomProvider → daily_url
"""

import logging
import time

import requests

logger = logging.getLogger(__name__)


class RoomProvisioningError(Exception):
    """The provider could not create the room (unreachable, rejected, misconfigured)"""


class DailyRoomProvider:
    """HTTP client for https://docs.daily.co/reference/rest-api/rooms"""

    def __init__(self, api_key, api_url='https://api.daily.co/v1', room_ttl_sec=7200, timeout=10.0):
        self.api_key = api_key
        self.api_url = api_url.rstrip('/')
        self.room_ttl_sec = room_ttl_sec
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get('DAILY_API_KEY') or '',
            api_url=config.get('DAILY_API_URL') or 'https://api.daily.co/v1',
            room_ttl_sec=int(config.get('DAILY_ROOM_TTL_SEC', 7200)),
            timeout=float(config.get('DAILY_TIMEOUT_SEC', 10)),
        )

    def create_room(self, room_name):
        """
        Create a public room named room_name

        Returns:
            str: join URL

        Raises:
            RoomProvisioningError
        """
        if not self.api_key:
            raise RoomProvisioningError('DAILY_API_KEY not configured')

        payload = {
            'name': room_name,
            'privacy': 'public',
            'properties': {
                'exp': int(time.time()) + self.room_ttl_sec,
            },
        }
        headers = {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json',
        }

        try:
            resp = requests.post(
                f'{self.api_url}/rooms',
                json=payload,
                headers=headers,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise RoomProvisioningError(f'Daily unreachable: {e}') from e

        if not resp.ok:
            raise RoomProvisioningError(
                f'Daily rejected room {room_name}: {resp.status_code} {resp.text[:200]}'
            )

        try:
            url = resp.json().get('url')
        except ValueError as e:
            raise RoomProvisioningError('Daily returned a non-JSON body') from e

        if not url:
            raise RoomProvisioningError('Daily response has no url')

        logger.info(f"[Daily] Room created: {room_name}")
        return url
