"""
Tests for the live document model.
"""

from video_discovery.document import Document


class TestParsing:
    """Document construction"""

    def test_fragment_gets_body(self, make_document):
        doc = make_document('<video src="a.mp4"></video>')

        assert doc.body.name == 'body'
        assert doc.select('body > video')

    def test_fragment_title_moved_to_head(self, make_document):
        doc = make_document('<title>Clip Page</title><p>hi</p>')

        assert doc.title == 'Clip Page'
        assert doc.select('head > title')

    def test_full_page_untouched(self, sample_page):
        assert sample_page.title == 'Sample Page'
        assert len(sample_page.select('body')) == 1

    def test_empty_markup(self):
        doc = Document.from_html('')
        assert doc.body.name == 'body'
        assert doc.title == ''

    def test_wrappers_are_stable(self, sample_page):
        assert sample_page.select('video')[0] is sample_page.select('video')[0]


class TestUrls:
    """Locator resolution"""

    def test_relative_src_resolved(self, make_document):
        doc = make_document('<video src="clip.mp4"></video>', url='https://example.com/a/page.html')
        assert doc.select('video')[0].resolved_src == 'https://example.com/a/clip.mp4'

    def test_base_href(self, make_document):
        doc = make_document(
            '<html><head><base href="https://cdn.example.com/assets/"></head>'
            '<body><video src="clip.mp4"></video></body></html>'
        )
        assert doc.select('video')[0].resolved_src == 'https://cdn.example.com/assets/clip.mp4'

    def test_blob_left_alone(self, make_document):
        doc = make_document('<video src="blob:https://example.com/1234"></video>')
        assert doc.select('video')[0].resolved_src == 'blob:https://example.com/1234'

    def test_no_base_keeps_value(self):
        doc = Document.from_html('<video src="clip.mp4"></video>')
        assert doc.select('video')[0].resolved_src == 'clip.mp4'


class TestCapabilities:
    """Element capability checks"""

    def test_video_capabilities(self, sample_page):
        video = sample_page.select('video')[0]

        assert video.is_playable
        assert video.has_nested_sources
        assert video.has_resource_locator
        assert len(video.nested_sources()) == 1

    def test_iframe_capabilities(self, sample_page):
        frame = sample_page.select('iframe')[0]

        assert frame.is_frame
        assert not frame.is_playable
        assert frame.nested_sources() == []

    def test_snapshot_attributes(self, sample_page):
        video = sample_page.select('video')[0]

        assert video.video_width == 1920
        assert video.video_height == 1080
        assert video.duration == 125.4

    def test_closest_is_inclusive(self, sample_page):
        hero = sample_page.select('.hero')[0]
        assert hero.closest('div') is hero


class TestComputedStyle:
    """Background image resolution"""

    def test_inline_background(self, make_document):
        doc = make_document('<div style="color: red; background-image: url(\'bg.mp4\')"></div>')
        assert doc.select('div')[0].computed_style('background-image') == "url('bg.mp4')"

    def test_background_shorthand(self, make_document):
        doc = make_document('<div style="background: #000 url(bg.webm) no-repeat"></div>')
        assert 'url(bg.webm)' in doc.select('div')[0].computed_style('background-image')

    def test_stylesheet_rule(self, sample_page):
        hero = sample_page.select('.hero')[0]
        assert hero.computed_style('background-image') == 'url("/media/loop.webm")'

    def test_inline_beats_stylesheet(self, make_document):
        doc = make_document(
            '<style>div { background-image: url(sheet.mp4); }</style>'
            '<div style="background-image: url(inline.mp4)"></div>'
        )
        assert doc.select('div')[0].computed_style('background-image') == 'url(inline.mp4)'

    def test_snapshot_beats_everything(self, make_document):
        doc = make_document(
            '<div style="background-image: url(inline.mp4)" '
            'data-computed-bg="url(&quot;https://x.com/real.mp4&quot;)"></div>'
        )
        assert doc.select('div')[0].computed_style('background-image') == 'url("https://x.com/real.mp4")'

    def test_unsupported_selector_skipped(self, make_document):
        doc = make_document(
            '<style>div::before { background-image: url(a.mp4); } '
            '@media print { p { color: red } } '
            '.ok { background-image: url(b.mp4); }</style>'
            '<div class="ok"></div>'
        )
        assert doc.select('.ok')[0].computed_style('background-image') == 'url(b.mp4)'

    def test_other_properties_from_inline(self, make_document):
        doc = make_document('<div style="color: red"></div>')
        div = doc.select('div')[0]

        assert div.computed_style('color') == 'red'
        assert div.computed_style('background-image') is None


class TestMutations:
    """Mutation batches and observers"""

    def test_each_mutation_is_a_batch(self, make_document):
        doc = make_document('<div id="feed"></div>')
        batches = []
        doc.observe(batches.append)

        feed = doc.select('#feed')[0]
        doc.append_html(feed, '<p>one</p>')
        doc.append_html(feed, '<p>two</p>')

        assert len(batches) == 2
        assert batches[0][0].added_nodes[0].name == 'p'

    def test_batch_groups_records(self, make_document):
        doc = make_document('<div id="feed"></div>')
        batches = []
        doc.observe(batches.append)
        feed = doc.select('#feed')[0]

        with doc.batch():
            doc.append_html(feed, '<p>one</p>')
            doc.append_html(feed, '<video src="v.mp4"></video>')

        assert len(batches) == 1
        assert len(batches[0]) == 2

    def test_removed_element_detached(self, sample_page):
        video = sample_page.select('video')[0]
        sample_page.remove(video)

        assert not sample_page.contains(video)
        assert sample_page.resolve_ref(video) is None
        assert sample_page.select('video') == []

    def test_disconnect(self, make_document):
        doc = make_document('<div></div>')
        batches = []
        doc.observe(batches.append)
        doc.disconnect(batches.append)

        doc.append_html(doc.body, '<p>x</p>')

        assert batches == []

    def test_observer_scope(self, make_document):
        doc = make_document('<div id="a"></div><div id="b"></div>')
        batches = []
        doc.observe(batches.append, root=doc.select('#a')[0])

        doc.append_html(doc.select('#b')[0], '<video></video>')
        doc.append_html(doc.select('#a')[0], '<video></video>')

        assert len(batches) == 1

    def test_stylesheet_cache_invalidated(self, make_document):
        doc = make_document('<style>.bg { background-image: url(a.mp4); }</style><div id="x"></div>')
        assert doc.select('#x')[0].computed_style('background-image') is None

        doc.append_html(doc.body, '<div class="bg"></div>')

        assert doc.select('.bg')[0].computed_style('background-image') == 'url(a.mp4)'
