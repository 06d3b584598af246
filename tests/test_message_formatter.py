from pipeline.message_formatter import add_unsubscribe_link, render_video_email, unsubscribe_url, video_subject


def test_unsubscribe_url_encodes_address():
    assert unsubscribe_url("a+b@x.io", "https://site.test") == "https://site.test/unsubscribe?email=a%2Bb%40x.io"


def test_footer_goes_before_body_close():
    html = add_unsubscribe_link("<html><body><p>hi</p></body></html>", "a@x.io", "https://site.test")
    assert html.endswith("</div></body></html>")
    assert 'href="https://site.test/unsubscribe?email=a%40x.io"' in html


def test_footer_appended_without_body_tag():
    html = add_unsubscribe_link("<p>plain</p>", "a@x.io", "https://site.test")
    assert html.startswith("<p>plain</p>")
    assert "Unsubscribe" in html


def test_video_email_escapes_title():
    html = render_video_email("<script>x</script> & co", "https://img/t.jpg", "https://www.youtube.com/watch?v=1")
    assert "<script>" not in html
    assert "&lt;script&gt;x&lt;/script&gt; &amp; co" in html
    assert 'src="https://img/t.jpg"' in html
    assert "</body>" in html


def test_subject():
    assert video_subject("Tour vlog") == "🎬 New Short: Tour vlog"
