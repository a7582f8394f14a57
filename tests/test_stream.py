import threading

import pytest

from sitewright.services.stream import (
    ErrorFrame,
    FinishFrame,
    FrameDecodeError,
    StartFrame,
    StreamWriter,
    TextFrame,
    Usage,
    chunk_text,
    decode_frame,
    decode_stream,
    encode_frame,
    new_message_id,
)


class TestEncoding:
    def test_start_frame(self):
        assert encode_frame(StartFrame("msg-abc")) == 'f:{"messageId":"msg-abc"}\n'

    def test_text_frame_is_json_string(self):
        assert encode_frame(TextFrame('say "hi"\n')) == '0:"say \\"hi\\"\\n"\n'

    def test_finish_frame(self):
        line = encode_frame(FinishFrame("stop", Usage(2, 3), False))
        assert line == 'e:{"finishReason":"stop","usage":{"promptTokens":2,"completionTokens":3},"isContinued":false}\n'

    def test_error_frame(self):
        assert encode_frame(ErrorFrame("boom")) == '3:"boom"\n'

    def test_every_frame_is_one_line(self):
        for frame in (StartFrame("m"), TextFrame("a\nb\r\n"), FinishFrame("other"), ErrorFrame("x\ny")):
            line = encode_frame(frame)
            assert line.endswith("\n") and line.count("\n") == 1


class TestDecoding:
    def test_decodes_what_it_encodes(self):
        frames = [StartFrame("msg-1"), TextFrame("héllo 👋"), FinishFrame("stop", Usage(1, 2), False), ErrorFrame("e")]
        assert decode_stream("".join(encode_frame(f) for f in frames)) == frames

    def test_decodes_original_client_format(self):
        frame = decode_frame('e:{"finishReason":"stop","usage":{"promptTokens":2,"completionTokens":2},"isContinued":false}')
        assert frame == FinishFrame("stop", Usage(2, 2), False)

    @pytest.mark.parametrize("line", ["no separator", "0:not json", "9:\"x\"", 'f:{"id":1}', "0:42", "e:{}"])
    def test_rejects_malformed_lines(self, line):
        with pytest.raises(FrameDecodeError):
            decode_frame(line)

    def test_blank_lines_are_skipped(self):
        assert decode_stream(['0:"a"\n', "\n", '0:"b"\n']) == [TextFrame("a"), TextFrame("b")]


class TestChunking:
    def test_chunks_are_bounded(self):
        text = "x" * 45
        assert [len(c) for c in chunk_text(text, 20)] == [20, 20, 5]

    def test_empty_text(self):
        assert chunk_text("", 20) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            chunk_text("abc", 0)


class TestStreamWriter:
    def test_message_ids_are_unique(self):
        assert new_message_id() != new_message_id()
        assert new_message_id().startswith("msg-")

    def test_iter_lines_ends_on_close(self):
        writer = StreamWriter()
        mid = writer.start()
        writer.text("hi")
        writer.finish("stop")
        writer.close()
        lines = list(writer.iter_lines())
        assert decode_stream(lines) == [StartFrame(mid), TextFrame("hi"), FinishFrame("stop")]

    def test_writes_after_close_are_dropped(self):
        writer = StreamWriter()
        writer.close()
        writer.text("late")
        assert writer.frames == []

    def test_disconnect_drops_further_writes(self):
        writer = StreamWriter()
        writer.text("a")
        writer.disconnect()
        writer.text("b")
        assert writer.frames == [TextFrame("a")]
        assert writer.disconnected

    def test_consumer_in_another_thread(self):
        writer = StreamWriter()
        received = []

        def consume():
            received.extend(writer.iter_lines())

        t = threading.Thread(target=consume)
        t.start()
        for i in range(50):
            writer.text(str(i))
        writer.close()
        t.join(timeout=5)
        assert [f.text for f in decode_stream(received)] == [str(i) for i in range(50)]

    def test_getvalue_matches_frames(self):
        writer = StreamWriter()
        writer.start("msg-x")
        writer.error("bad")
        assert writer.getvalue() == 'f:{"messageId":"msg-x"}\n3:"bad"\n'
