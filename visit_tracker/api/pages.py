"""HTML served by the home page route."""

# The script reports both the tracking result and any failure to the
# browser console.
HOME_PAGE = """\
<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>Visit Tracker</title>
  </head>
  <body>
    <h1>Visit Tracker</h1>
    <p><small>This site logs your IP address and browser details for analytics.</small></p>
    <script>
      fetch('/track')
        .then(res => res.json())
        .then(data => console.log('Tracked visit:', data))
        .catch(err => console.error('Tracking failed:', err));
    </script>
  </body>
</html>
"""
