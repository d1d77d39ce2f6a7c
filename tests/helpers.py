import asyncio

WALLET_ORIGIN = 'http://wallet.localhost:3001'
MERCHANT_ORIGIN = 'http://store.localhost:3000'


async def drain(turns=5):
    """Let queued postMessage deliveries run."""
    for _ in range(turns):
        await asyncio.sleep(0)


async def wait_for(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)
