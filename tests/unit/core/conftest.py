"""Shared fixtures for core unit tests"""

import pytest

from blockpress.core.parse import parse_html


SAMPLE_HTML = """\
<!DOCTYPE html>
<html>
<head>
  <title>Acme Home</title>
  <link rel="stylesheet" href="styles.css">
</head>
<body>
  <nav class="top-nav">
    <a href="/" data-editable="home_link">Home</a>
  </nav>
  <section class="hero-section">
    <h1 data-editable>Welcome</h1>
    <p data-editable="intro_text">We build things.</p>
    <img src="assets/hero.png" data-editable="hero_image">
  </section>
  <!-- BLOCK:features:draggable -->
  <section>
    <h2 data-editable>Features</h2>
  </section>
  <!-- /BLOCK:features -->
  <!-- BLOCK:gallery:draggable -->
  <section class="gallery"><img src="assets/a.png"></section>
  <!-- /BLOCK:gallery -->
  <div class="spacer"></div>
  <footer>
    <p data-editable>© Acme</p>
  </footer>
</body>
</html>
"""


@pytest.fixture(name="sample_html")
def sample_html_fixture():
    return SAMPLE_HTML


@pytest.fixture(name="sample_doc")
def sample_doc_fixture():
    return parse_html(SAMPLE_HTML, "home")
