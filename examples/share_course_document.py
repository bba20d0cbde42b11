"""
Share a course document with everyone who paid for the course through LiqPay.
Set LIQPAY_PUBLIC_KEY, LIQPAY_PRIVATE_KEY and GOOGLE_SERVICE_ACCOUNT_FILE first;
the service account must be an editor of the document.
"""
import asyncio
import logging
from datetime import datetime, timedelta

from enrollment_sync.permissions import GoogleDrivePermissionStore
from enrollment_sync.sharing import share_document_with_students
from enrollment_sync.sources import LiqPayPaymentSource

DOCUMENT_ID = "1AbCdEfGhIjKlMnOpQrStUvWxYz"
COURSE_DESCRIPTION = "Unit testing in JavaScript: masterclass"


async def run():
    end_time = datetime.utcnow()
    async with LiqPayPaymentSource(end_time - timedelta(days=30), end_time) as payments, \
            GoogleDrivePermissionStore() as permissions:
        await share_document_with_students(
            DOCUMENT_ID,
            payment_source=payments,
            permission_store=permissions,
            expected_description=COURSE_DESCRIPTION,
        )

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run())
