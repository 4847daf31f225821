import unittest

from static_serve.pipeline import (
    Pipeline,
    RequestContext,
    ResponseBodyTooLarge,
    ResponseContext,
)


class _ChunkStream:
    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        if not self._chunks:
            raise StopAsyncIteration
        chunk = self._chunks.pop(0)
        if isinstance(chunk, Exception):
            raise chunk
        return chunk

    async def aclose(self) -> None:
        self.closed = True


class PipelineTests(unittest.IsolatedAsyncioTestCase):
    async def test_stages_run_in_order_until_response_completes(self) -> None:
        calls = []

        async def tag(context: RequestContext) -> None:
            calls.append("tag")
            context.response.set_header("X-Stage", "tag")

        async def answer(context: RequestContext) -> None:
            calls.append("answer")
            context.response.status = 200
            context.response.write(b"ok")

        async def never(context: RequestContext) -> None:
            calls.append("never")

        pipeline = Pipeline().use(tag).use(answer).use(never)
        context = await pipeline.dispatch(RequestContext(path="/"))

        self.assertEqual(["tag", "answer"], calls)
        self.assertEqual(200, context.response.status)
        self.assertEqual("tag", context.response.get_header("x-stage"))
        self.assertEqual(b"ok", await context.response.read_body())

    async def test_unanswered_request_is_not_found(self) -> None:
        context = await Pipeline().dispatch(RequestContext(path="/missing"))
        self.assertEqual(404, context.response.status)
        self.assertEqual("Not Found", context.response.reason_phrase)

    async def test_stage_errors_propagate(self) -> None:
        async def broken(context: RequestContext) -> None:
            raise OSError("disk on fire")

        with self.assertRaises(OSError):
            await Pipeline().use(broken).dispatch(RequestContext(path="/"))


class ResponseContextTests(unittest.IsolatedAsyncioTestCase):
    def test_set_header_replaces_existing_value(self) -> None:
        response = ResponseContext()
        response.set_header("Cache-Control", "no-store")
        response.set_header("cache-control", "public")
        self.assertEqual([("cache-control", "public")], list(response.headers.raw_items()))

    async def test_read_body_drains_and_closes_stream(self) -> None:
        response = ResponseContext()
        stream = _ChunkStream([b"ab", b"cd"])
        response.stream(stream)

        self.assertEqual(b"abcd", await response.read_body())
        self.assertTrue(stream.closed)
        self.assertEqual(b"abcd", await response.read_body())

    async def test_read_body_closes_stream_on_error(self) -> None:
        response = ResponseContext()
        stream = _ChunkStream([b"ab", OSError("truncated")])
        response.stream(stream)

        with self.assertRaises(OSError):
            await response.read_body()
        self.assertTrue(stream.closed)

    async def test_read_body_enforces_size_limit(self) -> None:
        response = ResponseContext()
        stream = _ChunkStream([b"abcd", b"efgh", b"never"])
        response.stream(stream)

        with self.assertRaises(ResponseBodyTooLarge):
            await response.read_body(max_bytes=6)
        self.assertTrue(stream.closed)

    async def test_read_body_allows_exact_limit(self) -> None:
        response = ResponseContext()
        response.stream(_ChunkStream([b"abc", b"def"]))
        self.assertEqual(b"abcdef", await response.read_body(max_bytes=6))

    async def test_aclose_releases_undrained_stream(self) -> None:
        response = ResponseContext()
        stream = _ChunkStream([b"ab"])
        response.stream(stream)

        await response.aclose()
        self.assertTrue(stream.closed)

    def test_attaching_second_body_is_rejected(self) -> None:
        response = ResponseContext()
        response.stream(_ChunkStream([]))
        with self.assertRaises(RuntimeError):
            response.write(b"late")


if __name__ == "__main__":
    unittest.main()
