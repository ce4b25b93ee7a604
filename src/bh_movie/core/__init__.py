"""Trail buffers, playback, camera, scene and rendering."""
